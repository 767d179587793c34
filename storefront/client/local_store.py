# storefront/client/local_store.py
import json
import logging
import os
import tempfile
from collections.abc import Iterator, MutableMapping
from pathlib import Path

from pydantic import ValidationError

from storefront.schemas.cart import CartLine, CartView

logger = logging.getLogger(__name__)

DEFAULT_CART_KEY = "tempCart"
STORED_FIELDS = ("productId", "name", "price", "quantity")


class FileStorage(MutableMapping):
    """
    Small persistent key/value store, one file per key.

    Plays the part of the browser's localStorage for the cart client:
    string keys, string values, survives restarts.
    """

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def __getitem__(self, key: str) -> str:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise KeyError(key) from None

    def __setitem__(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write to a temp file first so a crash never leaves half a cart behind
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def __delitem__(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            raise KeyError(key) from None

    def __iter__(self) -> Iterator[str]:
        if not self.directory.exists():
            return iter(())
        return (path.stem for path in self.directory.glob("*.json"))

    def __len__(self) -> int:
        return sum(1 for _ in self)


class LocalCartStore:
    """
    Anonymous cart kept in local storage under a single key.

    Only load/save/clear live here; the controller owns the mutations.
    Nothing in this class raises: unreadable data loads as the empty cart
    and failed writes are logged.
    """

    def __init__(self, storage: MutableMapping, key: str = DEFAULT_CART_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> CartView:
        try:
            raw = self.storage.get(self.key)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read local cart: %s", exc)
            return CartView.empty()

        if not raw:
            return CartView.empty()

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Local cart is not valid JSON; starting from an empty cart")
            return CartView.empty()

        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            return CartView.empty()

        return CartView.from_items(self._valid_lines(data["items"]))

    def save(self, cart: CartView) -> None:
        try:
            self.storage[self.key] = cart.model_dump_json(by_alias=True)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save local cart: %s", exc)

    def clear(self) -> None:
        try:
            self.storage.pop(self.key, None)
        except OSError as exc:
            logger.error("Failed to clear local cart: %s", exc)

    def _valid_lines(self, raw_items: list) -> list[CartLine]:
        """
        Keep the well-formed lines, merging repeats of the same product.

        Stored lines must carry their own name and price; the defaults on
        CartLine are for server lines whose product has gone away.
        """
        lines: dict[int, CartLine] = {}
        for raw in raw_items:
            if not isinstance(raw, dict) or any(field not in raw for field in STORED_FIELDS):
                logger.debug("Dropping incomplete local cart line: %r", raw)
                continue
            try:
                line = CartLine.model_validate(raw)
            except ValidationError:
                logger.debug("Dropping malformed local cart line: %r", raw)
                continue

            existing = lines.get(line.product_id)
            if existing is None:
                lines[line.product_id] = line
            else:
                existing.quantity += line.quantity
        return list(lines.values())
