from __future__ import annotations

import re
from typing import Callable, Optional

ENV_VAR_RE = re.compile(r"\$\{([A-Z0-9_]+)\}")


def expand_env_vars(string: str, resolver: Callable[[str], Optional[str]]) -> str:
    """Replace every ``${NAME}`` in ``string`` with ``resolver(NAME)``.

    Unresolved names expand to an empty string. Text outside the pattern is
    left as is; the resolver is not called when nothing matches.
    """
    return ENV_VAR_RE.sub(lambda m: resolver(m.group(1)) or "", string)
