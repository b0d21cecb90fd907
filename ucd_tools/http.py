"""
Helpers for retrieving files over HTTP with Requests sessions.
"""

from __future__ import annotations

import logging
from atexit import register as atexit_register
from contextlib import suppress
from weakref import WeakSet

import requests
from wrapt import synchronized

from .core.exceptions import DataSourceError

__all__ = ['requests_session', 'http_cleanup', 'TextClient']
log = logging.getLogger(__name__)
__instances = WeakSet()


def requests_session(http_proxy: str = None, https_proxy: str = None) -> requests.Session:
    session = requests.Session()

    if http_proxy:
        session.proxies['http'] = http_proxy
    if https_proxy:
        session.proxies['https'] = https_proxy

    with synchronized(__instances):
        __instances.add(session)
    return session


class TextClient:
    """
    Retrieves text files, sharing one session across threads.

    :param session_factory: A function that accepts no arguments and returns a `requests.Session
      <http://docs.python-requests.org/en/master/api/#requests.Session>`_ object (default: :func:`requests_session`)
    :param timeout: Timeout (in seconds) to use for each request
    """

    def __init__(self, session_factory=None, timeout: float = 60):
        self._session_factory = session_factory or requests_session
        self._timeout = timeout
        self.__session = None

    @property
    def session(self) -> requests.Session:
        with synchronized(self):
            if self.__session is None:
                self.__session = self._session_factory()
            return self.__session

    def close(self):
        with synchronized(self):
            if self.__session is not None:
                try:
                    self.__session.close()
                except Exception as e:
                    log.debug(f'Encountered {type(e).__name__} while closing {self}: {e}')
                self.__session = None

    def get_text(self, url: str) -> str:
        """
        :param url: The URL of a text file
        :return: The decoded body of the response
        """
        log.debug(f'GET -> {url}')
        try:
            resp = self.session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise DataSourceError(f'Error retrieving {url}: {e}') from e
        if resp.status_code != 200:
            raise DataSourceError(f'bad GET status for {url}: {resp.status_code} {resp.reason}')
        resp.encoding = 'utf-8'  # UCD files are served as text/plain without a charset
        return resp.text


@atexit_register
def http_cleanup():
    with synchronized(__instances):
        for session in __instances:
            with suppress(Exception):
                session.close()
