"""Database operations for persisted IdP signing keys."""

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from tokenbridge.crypto.types import SigningKey
from tokenbridge.db.models_idp_keys import IdpKeyEntity

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def to_signing_key(entity: IdpKeyEntity) -> SigningKey:
    """Convert a stored row back into a JWKS key."""
    return SigningKey(
        kid=entity.kid,
        kty=entity.kty,
        use=entity.use,
        alg=entity.alg,
        x5t=entity.x5t,
        n=entity.n,
        e=entity.e,
        x5c=list(entity.x5c or []),
        issuer=entity.issuer,
    )


async def get_all_keys(session: AsyncSession) -> list[IdpKeyEntity]:
    """Return every stored key, ordered by kid."""
    stmt = select(IdpKeyEntity).order_by(IdpKeyEntity.kid)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def upsert_key(session: AsyncSession, key: SigningKey) -> None:
    """Insert the key, or overwrite every field of the row with the same kid.

    Runs as one ``INSERT ... ON CONFLICT DO UPDATE`` statement, so two writers
    racing on a new kid both succeed and the last one wins.
    """
    dialect = session.bind.dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f"no upsert for dialect {dialect!r}")

    values = {
        "kid": key.kid,
        "kty": key.kty,
        "use": key.use,
        "alg": key.alg,
        "x5t": key.x5t,
        "n": key.n,
        "e": key.e,
        "x5c": list(key.x5c),
        "issuer": key.issuer,
    }
    stmt = insert(IdpKeyEntity).values(**values)
    updates = {name: stmt.excluded[name] for name in values if name != "kid"}
    updates["updated_at"] = func.now()
    stmt = stmt.on_conflict_do_update(
        index_elements=[IdpKeyEntity.kid], set_=updates
    )
    await session.execute(stmt)
    await session.flush()


async def delete_key(session: AsyncSession, kid: str) -> bool:
    """Delete the key with this kid. Returns False when nothing matched."""
    stmt = delete(IdpKeyEntity).where(IdpKeyEntity.kid == kid)
    result = await session.execute(stmt)
    await session.flush()
    return bool(result.rowcount)
