from __future__ import annotations

"""
Import Specifier Scanner.

Extracts static module specifiers from JavaScript/TypeScript source text.

This is a textual scan, not a parser. It recognizes:

    import X from './x'
    import { a, b } from "@/lib/utils"
    import * as React from 'react'
    import './styles.css'
    export { default } from './Button'
    export * from '../shared'

Known limitations: text inside comments or string literals that looks like
an import statement is reported as well, and dynamic 'import()' calls or
'require()' are not. The walker receives the scanner as a parameter, so a
syntax-aware implementation can replace this one without touching the
traversal.
"""

import re
from typing import Callable, List

ImportScanner = Callable[[str], List[str]]

IMPORT_PATTERN = re.compile(
    r"""(?:import|export)\s+(?:[\w*\s{},]*\s+from\s+)?['"]([^'"]+)['"]"""
)


def scan_imports(source: str) -> List[str]:
    """
    Return the module specifiers referenced by 'source', in textual order.

    Duplicates are preserved; the walker's visited set makes them harmless.
    """
    return [match.group(1) for match in IMPORT_PATTERN.finditer(source)]
