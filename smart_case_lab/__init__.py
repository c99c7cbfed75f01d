"""Core logic for SmartCaseLab.

The Gradio UI lives in `app.py`. This package contains the pieces behind it:
- flatten JSON records into dot-path columns and rebuild them
- derive the column schema and project records into test case rows
- track cell edits, removed fields and manual columns
- export rows as JSON, structured CSV or a Postman collection
"""

RESERVED_COLUMN = "Test Case Name"
