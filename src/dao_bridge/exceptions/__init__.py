# dao_bridge/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py              # Host taxonomy (DataAccessError tree, TransactionError, ConfigurationError)
# │   ├── diagnostics.py       # Read SQLSTATE / vendor codes / columns off driver exceptions
# │   ├── sql_translators.py   # Driver exception -> DataAccessError (error codes, PEP 249 class, SQLSTATE)
# │   └── translator.py        # SQLAlchemyError -> DataAccessError policy (entry point)
