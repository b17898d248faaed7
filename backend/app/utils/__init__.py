from .json import dumps
from .errors import error_response
from .email import send_email
from .auth import normalize_email
