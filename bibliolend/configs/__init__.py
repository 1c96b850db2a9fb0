#!/usr/bin/env python

"""
    Configurations for Bibliolend

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
SCHEME = 'http'
HOST = os.environ.get('BIBLIOLEND_HOST', 'localhost')
PORT = int(os.environ.get('BIBLIOLEND_PORT', 8080))
WORKERS = int(os.environ.get('BIBLIOLEND_WORKERS', 1))
DEBUG = bool(int(os.environ.get('BIBLIOLEND_DEBUG', 0)))
LOG_LEVEL = os.environ.get('BIBLIOLEND_LOG_LEVEL', 'info')
SSL_CRT = os.environ.get('BIBLIOLEND_SSL_CRT')
SSL_KEY = os.environ.get('BIBLIOLEND_SSL_KEY')
CORS_ORIGINS = os.environ.get('BIBLIOLEND_CORS_ORIGINS', 'http://localhost:3000').split(',')

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}
if SSL_CRT and SSL_KEY:
    OPTIONS['ssl_keyfile'] = SSL_KEY
    OPTIONS['ssl_certfile'] = SSL_CRT
    SCHEME = 'https'

# Lending policy
LOAN_PERIOD_DAYS = int(os.environ.get('LOAN_PERIOD_DAYS', 30))
LENDING_MAX_RETRIES = int(os.environ.get('LENDING_MAX_RETRIES', 3))
LENDING_RETRY_BACKOFF = float(os.environ.get('LENDING_RETRY_BACKOFF', 0.05))

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST', 'localhost'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'bibliolend'),
}
# Seconds a SQLite writer waits on the database lock
DB_LOCK_TIMEOUT = float(os.environ.get('DB_LOCK_TIMEOUT', 15))

# Database configuration
DB_URI = os.environ.get('DB_URI') or (
    "sqlite:///bibliolend-test.db" if TESTING else
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

__all__ = [
    'SCHEME', 'HOST', 'PORT', 'DEBUG', 'OPTIONS', 'DB_URI', 'DB_CONFIG',
    'TESTING', 'LOAN_PERIOD_DAYS', 'LENDING_MAX_RETRIES', 'LENDING_RETRY_BACKOFF',
]
