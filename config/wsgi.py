"""WSGI entry point. Refuses to boot when the database is unreachable."""

import os
import sys

from django.core.wsgi import get_wsgi_application
from django.db import DatabaseError, connection
from loguru import logger

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()

try:
    connection.ensure_connection()
except DatabaseError as exc:
    logger.opt(exception=exc).critical("Database unreachable at startup")
    sys.exit(1)
finally:
    connection.close()
