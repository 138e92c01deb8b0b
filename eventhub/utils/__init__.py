"""Field normalizers shared by every adapter.

Provides pure helpers for:
- Date/time parsing (date_parser)
- Price parsing (prices)
- Venue parsing and region defaults (locations)
- URL validation (urls)
"""
