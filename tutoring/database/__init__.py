from .database import DB, Base, UTCDateTime, db, db_context, db_wrapper, filter_by, select


__all__ = ["DB", "Base", "UTCDateTime", "db", "db_context", "db_wrapper", "filter_by", "select"]
