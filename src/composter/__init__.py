from __future__ import annotations

"""
Composter: a vault for React components.

Bundles a component with every local file it imports, records its external
package dependencies, and moves the bundle to and from the Vault Service.
"""

from composter.domain.constants import APP_VERSION

__version__ = APP_VERSION
