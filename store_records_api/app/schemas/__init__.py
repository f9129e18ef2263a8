"""
Pydantic schema definitions for records and API payloads.

Records keep the column names of the remote tables (``StoreID``,
``StoreName``...) while API payloads use the form's lower camel case
names (``storeName``, ``outsourcingCosts``...).
"""
