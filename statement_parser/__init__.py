"""
Bank Statement Parser - Source Package

Turns an uploaded bank statement (CSV or PDF) into a list of transactions
using Gemini, then exports them to CSV or to a new Google Sheet.

DESIGN PRINCIPLES:
1. The model extracts, the code only cleans up its answer
2. Fail early, fail visibly
3. No invented data - missing fields get explicit placeholders
4. Every step is logged with a correlation ID
5. Google access is always on behalf of the signed-in user
"""

__version__ = "1.0.0"
__author__ = "Bank Statement Parser Team"
