import logging
from typing import List, Optional

from .brand import Brand
from .constants import BRAND_FILE_STORE_DIR, BRAND_STATE_PREFIX
from .errors import BrandNotFoundError
from .stores import FileStore, StateStore

logger = logging.getLogger(__name__)


def brand_state_key(bid: str) -> str:
    return f"{BRAND_STATE_PREFIX}{bid}"


def brand_file_path(bid: str) -> str:
    return f"{BRAND_FILE_STORE_DIR}/{bid}.json"


class BrandManager:
    """Persists brands in the state store, with the file store as the rebuild source.

    Both stores are created on first use so handlers that never touch a brand
    do not pay for the boto3 setup.
    """

    def __init__(self, state_store: Optional[StateStore] = None, file_store: Optional[FileStore] = None):
        self._state_store = state_store
        self._file_store = file_store

    @property
    def state_store(self) -> StateStore:
        if self._state_store is None:
            self._state_store = StateStore()
            logger.debug("State store initialized")
        return self._state_store

    @property
    def file_store(self) -> FileStore:
        if self._file_store is None:
            self._file_store = FileStore()
            logger.debug("File store initialized")
        return self._file_store

    def get_brand(self, bid: str) -> Brand:
        logger.debug("Getting brand %s from state store", bid)
        brand_string = self.state_store.get(brand_state_key(bid))
        if brand_string:
            return Brand.from_json(brand_string)

        logger.debug("Brand %s not found in state store, checking file store", bid)
        try:
            brand = Brand.from_json(self.file_store.read(brand_file_path(bid)))
        except (FileNotFoundError, ValueError) as error:
            # unparsable records count as missing
            logger.error("Brand not found in state store or file store for bid %s: %s", bid, error)
            raise BrandNotFoundError(bid) from error

        # load the brand back into the state store
        self.state_store.put(brand_state_key(bid), brand.to_json())
        logger.info("Restored brand %s from file store into state store", bid)
        return brand

    def save_brand(self, brand: Brand) -> Brand:
        logger.debug("Saving brand %s to state store and file store", brand.bid)
        payload = brand.to_json()
        self.state_store.put(brand_state_key(brand.bid), payload)
        self.file_store.write(brand_file_path(brand.bid), payload)
        return brand

    def delete_brand(self, bid: str) -> None:
        self.state_store.delete(brand_state_key(bid))
        self.file_store.delete(brand_file_path(bid))
        logger.info("Deleted brand %s", bid)

    def get_all_brands(self) -> List[Brand]:
        prefix = f"{BRAND_FILE_STORE_DIR}/"
        paths = self.file_store.list(prefix)
        logger.debug("Found %d brands in file store at path %s", len(paths), prefix)

        brands = []
        for path in paths:
            try:
                raw = self.file_store.read(path)
            except (FileNotFoundError, RuntimeError) as error:
                logger.warning("Error reading brand from file store %s: %s", path, error)
                continue

            try:
                brands.append(Brand.from_json(raw))
            except ValueError as error:
                # json.JSONDecodeError is a ValueError too
                logger.warning("Error parsing brand from file store %s: %s", path, error)
        return brands
