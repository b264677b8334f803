# ==============================================================================
# DEPENDENCY CONTAINER
# ==============================================================================
# Builds repositories and services for one Database. create_app() makes one
# container per Flask app and stores it in app.extensions, so every test app
# gets its own database and services.
#
#   container = AppContainer(Database(url))
#   container.inventory_service.create_product(...)
# ==============================================================================

from typing import Optional

from thrift_pos.repositories import (
    CategoryRepository,
    Database,
    LotRepository,
    OperatorRepository,
    ProductRepository,
    SalesRepository,
    SupplierRepository,
)
from thrift_pos.services import (
    CartService,
    CatalogService,
    InventoryService,
    LabelService,
    LotService,
    SalesService,
    StatsService,
    UserService,
)


class AppContainer:
    """
    Lazily built repositories and services sharing one Database.
    """

    def __init__(self, db: Database, label_currency="THB "):
        self.db = db
        self.label_currency = label_currency

        self._category_repo: Optional[CategoryRepository] = None
        self._supplier_repo: Optional[SupplierRepository] = None
        self._lot_repo: Optional[LotRepository] = None
        self._product_repo: Optional[ProductRepository] = None
        self._sales_repo: Optional[SalesRepository] = None
        self._operator_repo: Optional[OperatorRepository] = None

        self._catalog_service: Optional[CatalogService] = None
        self._lot_service: Optional[LotService] = None
        self._inventory_service: Optional[InventoryService] = None
        self._cart_service: Optional[CartService] = None
        self._sales_service: Optional[SalesService] = None
        self._stats_service: Optional[StatsService] = None
        self._user_service: Optional[UserService] = None
        self._label_service: Optional[LabelService] = None

    # =========================================================================
    # REPOSITORIES
    # =========================================================================

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self.db)
        return self._category_repo

    @property
    def supplier_repo(self) -> SupplierRepository:
        if self._supplier_repo is None:
            self._supplier_repo = SupplierRepository(self.db)
        return self._supplier_repo

    @property
    def lot_repo(self) -> LotRepository:
        if self._lot_repo is None:
            self._lot_repo = LotRepository(self.db)
        return self._lot_repo

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.db)
        return self._product_repo

    @property
    def sales_repo(self) -> SalesRepository:
        if self._sales_repo is None:
            self._sales_repo = SalesRepository(self.db)
        return self._sales_repo

    @property
    def operator_repo(self) -> OperatorRepository:
        if self._operator_repo is None:
            self._operator_repo = OperatorRepository(self.db)
        return self._operator_repo

    # =========================================================================
    # SERVICES
    # =========================================================================

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.db, self.category_repo, self.supplier_repo)
        return self._catalog_service

    @property
    def lot_service(self) -> LotService:
        if self._lot_service is None:
            self._lot_service = LotService(self.db, self.lot_repo, self.supplier_repo)
        return self._lot_service

    @property
    def inventory_service(self) -> InventoryService:
        if self._inventory_service is None:
            self._inventory_service = InventoryService(
                self.db, self.product_repo, self.lot_repo, self.category_repo
            )
        return self._inventory_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.inventory_service)
        return self._cart_service

    @property
    def sales_service(self) -> SalesService:
        if self._sales_service is None:
            self._sales_service = SalesService(self.db, self.sales_repo, self.product_repo)
        return self._sales_service

    @property
    def stats_service(self) -> StatsService:
        if self._stats_service is None:
            self._stats_service = StatsService(self.sales_repo, self.product_repo)
        return self._stats_service

    @property
    def user_service(self) -> UserService:
        if self._user_service is None:
            self._user_service = UserService(self.db, self.operator_repo)
        return self._user_service

    @property
    def label_service(self) -> LabelService:
        if self._label_service is None:
            self._label_service = LabelService(
                self.inventory_service, self.lot_service, self.label_currency
            )
        return self._label_service
