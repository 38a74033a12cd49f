# config.py

# ---------- GENERAL ----------
VERSION = "0.3.0"

JS_API = "js-api"
CSS_API = "css-api"
API_TYPES = (JS_API, CSS_API)

# timeout per descarregar el dataset remot (segons)
REQUEST_TIMEOUT = 30

# ---------- PLAYWRIGHT ----------
PLAYWRIGHT = {
    "headless": True,
    "browser": "chromium",
    "page_timeout": 30000,
    "start_url": "https://example.com",
    # sessions de navegador en paral·lel per batch
    "sessions": 2,
}

# ---------- PROBES ----------
CALL_EXPRESSION = "CallExpression"
NEW_EXPRESSION = "NewExpression"
MEMBER_EXPRESSION = "MemberExpression"

# globals whose lowercase twin is a different, legitimate API
CASE_SENSITIVE_EXCEPTIONS = frozenset({"crypto", "Crypto"})

# error messages that mean "this must be called with new"
NEEDS_NEW_MARKERS = (
    "Please use the 'new' operator",  # V8 builtins
    "without 'new'",                  # V8 classes
    "requires 'new'",
    "without new is forbidden",       # SpiderMonkey builtins
    "must be invoked with 'new'",     # SpiderMonkey classes
    "without |new|",                  # JavaScriptCore
)

NOT_A_CONSTRUCTOR_MARKERS = (
    "not a constructor",
)

# nom de l'error de getter rebutjat (receptor incorrecte)
GETTER_REJECTION_ERROR = "TypeError"
