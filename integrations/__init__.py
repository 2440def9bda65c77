"""
integrations: static catalog of known OAuth providers.

Provides:
  • Integration definitions (token endpoint, refresh strategy, credential schema)
  • ``IntegrationCatalog`` lookup
  • Credential and scope validation used by the configuration store

Add a provider by appending an ``Integration`` to ``integrations.providers``.
"""
