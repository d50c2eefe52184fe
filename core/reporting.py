"""
Duty Row Tables
===============

pandas views of bucketed duty rows for renderers and exports.
"""

from typing import List

import pandas as pd

from models.data_models import DutyRow, AuditFlag, Bucket

ROW_COLUMNS = [
    'startDate', 'date', 'bucket', 'dutyCodes', 'flights', 'sectors',
    'times', 'hotels', 'remarks', 'flags',
]
_LIST_COLUMNS = ['dutyCodes', 'flights', 'sectors', 'times', 'hotels', 'remarks', 'flags']


def duty_rows_frame(rows: List[DutyRow]) -> pd.DataFrame:
    """One row per duty day, list fields joined with spaces."""
    records = []
    for row in rows:
        record = row.to_dict()
        for col in _LIST_COLUMNS:
            record[col] = ' '.join(record[col])
        records.append(record)
    return pd.DataFrame.from_records(records, columns=ROW_COLUMNS)


def bucket_summary(rows: List[DutyRow]) -> pd.DataFrame:
    """
    Duty and flag counts per posting bucket.

    Index: CURRENT, PREV, and "" (outside both windows).
    Columns: duties, then one count column per flag in display order.
    """
    flag_names = [f.value for f in AuditFlag]
    index = [b.value for b in Bucket]
    summary = pd.DataFrame(0, index=index, columns=['duties'] + flag_names)
    summary.index.name = 'bucket'
    for row in rows:
        summary.loc[row.bucket, 'duties'] += 1
        for flag in row.flags:
            summary.loc[row.bucket, flag] += 1
    return summary
