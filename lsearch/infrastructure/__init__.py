"""Infrastructure - SQLite connection pool and schema"""
