"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Operations
CLONE = "clone"
EVAL = "eval"

# Request fields
OP = "op"
ID = "id"
SESSION = "session"
CODE = "code"

# Response fields
NEW_SESSION = "new-session"
VALUE = "value"
OUT = "out"
ERR = "err"
EX = "ex"
ROOT_EX = "root-ex"
STATUS = "status"

# Status tokens
DONE = "done"

# Error fields, in order of precedence within a single response.
ERROR_FIELDS = (EX, ROOT_EX, ERR)

# Output fields, in order of precedence within a single response.
OUTPUT_FIELDS = (VALUE, OUT)
