from shared.database import Base, Database


def _load_models() -> None:
    """Import every mapped module so its tables are registered on ``Base.metadata``."""
    import catalogue.product  # noqa: F401
    import identity.address  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401


def setup_db(database: Database) -> None:
    """Setup database schema"""
    _load_models()
    Base.metadata.create_all(database.engine)


def drop_db(database: Database) -> None:
    """Drop database schema"""
    _load_models()
    Base.metadata.drop_all(database.engine)


def reset_db(database: Database) -> None:
    """Delete every row, children first, keeping the schema."""
    _load_models()
    with database.transaction() as session:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
