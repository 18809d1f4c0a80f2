from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from sealkit.aead import generate_key, seal, seal_with_random_nonce, unseal, unseal_embedded
from sealkit.constants import CIPHERS, DEFAULT_CIPHER, ENV_KEY
from sealkit.envvars import expand_env_vars
from sealkit.errors import QuietExit, SealkitError
from sealkit.logging_config import configure_logging
from sealkit.output import CommandOutput
from sealkit.unpack import unpack_tarball

logger = logging.getLogger("sealkit.cli")


def _read_bytes(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as fh:
        return fh.read()


def _write_bytes(path: str, data: bytes) -> None:
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as fh:
        fh.write(data)


def _load_key(key_hex: Optional[str], key_env: str) -> bytes:
    """Key bytes from --key-hex, else from the named environment variable."""
    raw = key_hex if key_hex is not None else os.environ.get(key_env)
    if not raw:
        raise ValueError(f"No key given; pass --key-hex or set {key_env}")
    try:
        return bytes.fromhex(raw.strip())
    except ValueError:
        raise ValueError("Key must be hex encoded")


def _parse_nonce(nonce_hex: Optional[str]) -> Optional[bytes]:
    if nonce_hex is None:
        return None
    try:
        return bytes.fromhex(nonce_hex.strip())
    except ValueError:
        raise ValueError("Nonce must be hex encoded")


def cmd_unpack(archive: str, *, dest: str, strip: int = 0, output: CommandOutput = CommandOutput.NORMAL) -> bool:
    """Unpack a zstd tarball into ``dest``.

    Args:
        archive: Path to a .tar.zst file ('-' for stdin).
        dest: Destination directory; created if missing.
        strip: Number of leading path segments to drop from every entry.
        output: Verbosity of progress output.
    """
    contents = _read_bytes(archive)
    unpack_tarball(contents, dest, strip)
    if output is not CommandOutput.QUIET:
        print(f"Done: unpacked {archive} into {dest}")
    return True


def cmd_seal(
    input_path: str,
    output_path: str,
    *,
    key: bytes,
    nonce: Optional[bytes] = None,
    cipher: str = DEFAULT_CIPHER,
) -> bool:
    """Encrypt a file.

    Without ``nonce`` a random nonce is generated and stored in front of the
    ciphertext. With an explicit ``nonce`` the output is ``ciphertext || tag``
    only and the caller is responsible for keeping the nonce.
    """
    data = _read_bytes(input_path)
    if nonce is None:
        blob = seal_with_random_nonce(data, key, cipher=cipher)
    else:
        blob = seal(data, key, nonce, cipher=cipher)
    _write_bytes(output_path, blob)
    return True


def cmd_unseal(
    input_path: str,
    output_path: str,
    *,
    key: bytes,
    nonce: Optional[bytes] = None,
    cipher: str = DEFAULT_CIPHER,
) -> bool:
    """Decrypt a file written by :func:`cmd_seal`."""
    blob = _read_bytes(input_path)
    if nonce is None:
        plain = unseal_embedded(blob, key, cipher=cipher)
    else:
        plain = unseal(blob, key, nonce, cipher=cipher)
    if plain is None:
        print("Error: decryption failed (wrong key or nonce, or data corrupted)", file=sys.stderr)
        raise QuietExit(1)
    _write_bytes(output_path, plain)
    return True


def cmd_expand(text: str) -> bool:
    """Print ``text`` with ${VAR} placeholders expanded from the environment."""
    print(expand_env_vars(text, os.environ.get))
    return True


def cmd_keygen() -> bool:
    print(generate_key().hex())
    return True


def _add_key_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("input", help="Input file ('-' for stdin)")
    p.add_argument("output", help="Output file ('-' for stdout)")
    p.add_argument("--key-hex", help="32-byte key, hex encoded")
    p.add_argument("--key-env", default=ENV_KEY, help=f"Environment variable holding the hex key (default {ENV_KEY})")
    p.add_argument(
        "--nonce-hex",
        help="12-byte nonce, hex encoded. If omitted, a random nonce is generated and stored with the ciphertext",
    )
    p.add_argument("--cipher", choices=list(CIPHERS), default=DEFAULT_CIPHER, help=f"AEAD cipher (default {DEFAULT_CIPHER})")


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="sealkit",
        description="Safe tarball extraction and secret sealing",
    )
    ap.add_argument("--quiet", "-q", action="store_true", help="Only print warnings and errors")
    ap.add_argument("--verbose", "-v", action="store_true", help="Print every extracted or skipped entry")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_unpack = sub.add_parser("unpack", help="Unpack a zstd-compressed tarball")
    ap_unpack.add_argument("archive", help="Archive path ('-' for stdin)")
    ap_unpack.add_argument("--dest", required=True, help="Destination directory")
    ap_unpack.add_argument("--strip", type=int, default=0, help="Strip N leading path components (default 0)")

    ap_seal = sub.add_parser("seal", help="Encrypt a secret")
    _add_key_args(ap_seal)

    ap_unseal = sub.add_parser("unseal", help="Decrypt a secret")
    _add_key_args(ap_unseal)

    ap_expand = sub.add_parser("expand", help="Expand ${VAR} placeholders from the environment")
    ap_expand.add_argument("text", help="Template text")

    sub.add_parser("keygen", help="Print a random hex key")

    args = ap.parse_args(argv)
    output = CommandOutput.from_quiet_and_verbose(args.quiet, args.verbose)
    configure_logging(output)
    try:
        if args.cmd == "unpack":
            if args.strip < 0:
                raise ValueError("--strip must be non-negative")
            cmd_unpack(args.archive, dest=args.dest, strip=args.strip, output=output)
        elif args.cmd in ("seal", "unseal"):
            key = _load_key(args.key_hex, args.key_env)
            nonce = _parse_nonce(args.nonce_hex)
            fn = cmd_seal if args.cmd == "seal" else cmd_unseal
            fn(args.input, args.output, key=key, nonce=nonce, cipher=args.cipher)
        elif args.cmd == "expand":
            cmd_expand(args.text)
        elif args.cmd == "keygen":
            cmd_keygen()
        else:
            raise RuntimeError("Unknown command")
    except QuietExit as e:
        sys.exit(e.code)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (SealkitError, OSError, ValueError, RuntimeError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
