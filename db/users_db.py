from db import get_pool

_USER_COLUMNS = "id, email, name, avatar_url, currency, created_at"


async def get_user_by_email(email):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email=$1",
            email,
        )
        return dict(row) if row else None


async def get_user_by_id(user_id: int):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id=$1",
            user_id,
        )
        return dict(row) if row else None


async def upsert_user(email: str, name: str, avatar_url: str | None = None):
    """
    Returns user dict. Creates the user on first sign-in, otherwise refreshes
    name/avatar when the identity provider reports new values.
    """
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO users (email, name, avatar_url)
            VALUES ($1, $2, $3)
            ON CONFLICT (email) DO UPDATE
            SET name = CASE WHEN EXCLUDED.name <> '' THEN EXCLUDED.name ELSE users.name END,
                avatar_url = COALESCE(EXCLUDED.avatar_url, users.avatar_url)
            RETURNING {_USER_COLUMNS}
            """,
            email,
            name or "",
            avatar_url,
        )
        return dict(row)


async def set_user_currency(user_id: int, currency: str):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"UPDATE users SET currency=$2 WHERE id=$1 RETURNING {_USER_COLUMNS}",
            user_id,
            currency,
        )
        return dict(row) if row else None
