from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_engines(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield provider, create_engine(provider.conn_info["database_uri"])


def setup_db(domain: Domain):
    """Create tables for every aggregate, entity and projection on a SQL provider.

    The memory provider used in development and tests needs no schema, so this
    is a no-op unless the active config points at sqlite or postgresql.
    """
    with domain.domain_context():
        for provider, engine in _sql_engines(domain):
            # Touching the repository's _dao registers the model with SQLAlchemy
            for registry in (domain.registry.aggregates, domain.registry.entities, domain.registry.projections):
                for _, record in registry.items():
                    if record.cls.meta_.provider == provider.name:
                        domain.repository_for(record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    with domain.domain_context():
        for provider, engine in _sql_engines(domain):
            provider._metadata.drop_all(engine)
