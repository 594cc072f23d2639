"""
Polling Module - Black Box Interface

Purpose: GET a URL until the backend answers with 200
Interface: HTTPPoller.get_url()
Hidden: httpx client setup, status classification, retry wiring

Non-200 responses and transport errors are retried; the last one is raised
once the budget is spent.
"""

from .client import DEFAULT_REQUEST_TIMEOUT, DEFAULT_RETRY_TIMEOUT, HTTPPoller

__all__ = ["DEFAULT_REQUEST_TIMEOUT", "DEFAULT_RETRY_TIMEOUT", "HTTPPoller"]
