import logging
import os
import stat
import sys
from typing import Dict, Iterable, List

log = logging.getLogger(__name__)

STDIN = "-"


def get_content(input_path: str) -> bytes:
    if input_path == STDIN:
        return sys.stdin.buffer.read()
    with open(input_path, 'rb') as f:
        return f.read()


def write_key_bundle(bundle: Dict[str, bytes], output_dir: str, secret_names: Iterable[str] = ()) -> List[str]:
    """Write every artifact of `bundle` into `output_dir`.

    Returns the written paths. Raises FileExistsError before writing anything
    if one of the targets already exists. Names listed in `secret_names` are
    created with owner-only permissions.
    """
    paths = {name: os.path.join(output_dir, name) for name in bundle}
    for path in paths.values():
        if os.path.exists(path):
            raise FileExistsError(f"File '{path}' already exists.")

    secret_names = set(secret_names)
    written = []
    for name, data in bundle.items():
        path = paths[name]
        if name in secret_names:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, stat.S_IRUSR | stat.S_IWUSR)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
        else:
            with open(path, 'wb') as f:
                f.write(data)
        log.info("Wrote '%s' (%d bytes)", path, len(data))
        written.append(path)
    return written
