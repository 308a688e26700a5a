#!/usr/bin/env python3
"""
Check that the text-generation backend answers and the halal reference data is usable.
Run from backend: python scripts/check_backends.py
Exit 0 if both are usable; 1 otherwise.
"""
import sys
from pathlib import Path
from typing import Optional, Tuple

# Add backend to path when run as script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# Short timeout for health check
HEALTH_TIMEOUT = 8


def check_textgen(timeout: int = HEALTH_TIMEOUT) -> Tuple[bool, str]:
    """Return (success, message)."""
    from halalcheck.errors import HalalCheckError
    from halalcheck.llm.client import TextGenerator
    try:
        generator = TextGenerator(timeout=timeout)
        reply = generator.generate(system="Reply with the single word OK.", prompt="ping", max_tokens=5)
    except (HalalCheckError, ValueError) as e:
        return False, str(e)
    if not reply:
        return False, f"{generator.provider}: empty reply"
    return True, f"ok ({generator.provider})"


def check_reference(path: Optional[Path] = None) -> Tuple[bool, str]:
    """Return (success, message)."""
    from halalcheck.reference.reference_registry import ReferenceRegistry
    try:
        registry = ReferenceRegistry(path)
    except (OSError, ValueError, KeyError) as e:
        return False, f"unreadable: {e}"
    if len(registry) == 0:
        return False, "no reference ingredients loaded"
    if registry.lookup("water") is None:
        return False, "loaded but 'water' does not resolve"
    return True, f"ok ({len(registry)} rows, version {registry.get_version()})"


def main() -> int:
    print("Checking analysis backends...")
    tg_ok, tg_msg = check_textgen()
    print(f"  Text generation: {'OK' if tg_ok else 'FAIL'} - {tg_msg}")
    ref_ok, ref_msg = check_reference()
    print(f"  Reference data:  {'OK' if ref_ok else 'FAIL'} - {ref_msg}")
    if tg_ok and ref_ok:
        print("All backends are usable.")
        return 0
    print("At least one backend is unusable.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
