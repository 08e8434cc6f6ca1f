"""Discord wallet collection bot backed by role-partitioned Google Sheets."""

__version__ = "0.1.0"
