"""
Default home of provider adapter modules.

With the default configuration the registry imports
``accountreload.providers.<service>`` (for example
``accountreload.providers.pronote``) the first time an account of that
service is reloaded. Provider packages install their modules here, or the
location is moved with ``ACCOUNTRELOAD_ADAPTER_PACKAGE`` /
``ACCOUNTRELOAD_ADAPTER_<SERVICE>``.

Each module must expose the coroutine listed in :mod:`accountreload.protocols`
for its service. Adapters that need HTTP should build their sessions with
:func:`accountreload.http_client.create_client_session`.
"""

from pkgutil import extend_path

__path__ = extend_path(__path__, __name__)
