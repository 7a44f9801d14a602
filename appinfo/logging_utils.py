from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def setup_logging(*, console_level: int = logging.WARNING, file_path: Optional[Union[str, Path]] = None, file_level: int = logging.DEBUG, replace_existing: bool = True) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    if replace_existing:
        root.handlers.clear()
    formatter = logging.Formatter(LOG_FORMAT)
    console_handlers = [h for h in root.handlers if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)]
    if not console_handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handlers = [console_handler]
        root.addHandler(console_handler)
    for handler in console_handlers:
        handler.setLevel(console_level)
        handler.setFormatter(formatter)
    if file_path:
        path_obj = Path(file_path)
        path_obj.parent.mkdir(parents=True, exist_ok=True)
        for handler in root.handlers:
            if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path_obj.absolute():
                handler.setLevel(file_level)
                handler.setFormatter(formatter)
                break
        else:
            file_handler = logging.FileHandler(path_obj, mode='w' if replace_existing else 'a', encoding='utf-8')
            file_handler.setLevel(file_level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)


__all__ = ['LOG_FORMAT', 'setup_logging']
