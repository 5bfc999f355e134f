"""Seed data script for local development.

Creates:
- 1 admin, 2 organizers, 3 providers and 10 clients
- A small catalog of event equipment per provider
- A few orders in different lifecycle states

Environment Variables:
    RESET_DATA: Set to "true" to clear all marketplace data before seeding (default: false)
    CLIENT_COUNT: Number of test clients (default: 10)

Usage:
    uv run python -m scripts.seed_data
    RESET_DATA=true uv run python -m scripts.seed_data

Accounts (password: password123):
    admin@yafoy.test, organizer1@yafoy.test, provider1@yafoy.test, client01@yafoy.test ...
"""

import asyncio
import os
import random
from datetime import date, timedelta
from decimal import Decimal

# Configuration from environment variables
RESET_DATA = os.getenv("RESET_DATA", "false").lower() == "true"
CLIENT_COUNT = int(os.getenv("CLIENT_COUNT", "10"))

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.database import async_session_maker, engine
from yafoy.core.security import get_password_hash
from yafoy.models import Order, OrderStatus, Product, User, UserRole

CATALOG = [
    ("Tente blanche 10x20", "Tentes & Chapiteaux", Decimal("75000.00")),
    ("Chaises Napoléon (lot de 50)", "Mobilier", Decimal("25000.00")),
    ("Sonorisation complète", "Son & Lumière", Decimal("60000.00")),
    ("Tables rondes (lot de 10)", "Mobilier", Decimal("20000.00")),
    ("Éclairage LED d'ambiance", "Son & Lumière", Decimal("35000.00")),
    ("Groupe électrogène 20 kVA", "Énergie", Decimal("50000.00")),
]

LOCATIONS = ["Dakar", "Abidjan", "Thiès", "Saint-Louis"]


async def reset_marketplace_data(session: AsyncSession) -> None:
    """Clear all marketplace tables in foreign-key order."""
    print("Resetting marketplace data...")
    for table in (
        "client_organizer_assignments",
        "notifications",
        "chat_messages",
        "chat_room_members",
        "chat_rooms",
        "favorites",
        "orders",
        "products",
        "users",
    ):
        await session.execute(text(f"DELETE FROM {table}"))
    await session.commit()
    print("  Cleared all marketplace tables")


async def seed_users(session: AsyncSession) -> dict[str, list[User]]:
    """Create accounts for every role.

    Returns:
        Users grouped by role value
    """
    print("Seeding users...")

    result = await session.execute(select(User).limit(1))
    if result.scalar_one_or_none():
        print("  Users already exist, skipping...")
        result = await session.execute(select(User))
        grouped: dict[str, list[User]] = {}
        for user in result.scalars().all():
            grouped.setdefault(user.role, []).append(user)
        return grouped

    password_hash = get_password_hash("password123")

    def make(email: str, full_name: str, role: UserRole) -> User:
        return User(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role=role.value,
            location=random.choice(LOCATIONS),
            status="active",
        )

    grouped = {
        UserRole.ADMIN.value: [make("admin@yafoy.test", "Administrateur", UserRole.ADMIN)],
        UserRole.ORGANIZER.value: [
            make(f"organizer{i}@yafoy.test", f"Organisateur {i}", UserRole.ORGANIZER)
            for i in range(1, 3)
        ],
        UserRole.PROVIDER.value: [
            make(f"provider{i}@yafoy.test", f"Prestataire {i}", UserRole.PROVIDER)
            for i in range(1, 4)
        ],
        UserRole.CLIENT.value: [
            make(f"client{i:02d}@yafoy.test", f"Client {i:02d}", UserRole.CLIENT)
            for i in range(1, CLIENT_COUNT + 1)
        ],
    }

    all_users = [u for users in grouped.values() for u in users]
    session.add_all(all_users)
    await session.commit()

    # Refresh to get IDs
    for user in all_users:
        await session.refresh(user)

    print(f"  Created {len(all_users)} users")
    return grouped


async def seed_products(session: AsyncSession, providers: list[User]) -> list[Product]:
    """Give each provider part of the catalog."""
    print("Seeding products...")

    result = await session.execute(select(Product).limit(1))
    if result.scalar_one_or_none():
        print("  Products already exist, skipping...")
        result = await session.execute(select(Product))
        return list(result.scalars().all())

    products = []
    for index, (name, category, price) in enumerate(CATALOG):
        provider = providers[index % len(providers)]
        products.append(
            Product(
                provider_id=provider.user_id,
                name=name,
                description=f"{name} disponible à la location.",
                category_name=category,
                price_per_day=price,
                deposit_amount=(price * Decimal("0.3")).quantize(Decimal("0.01")),
                quantity_available=random.randint(1, 10),
                images=[],
                location=provider.location,
                is_active=True,
                is_verified=index % 2 == 0,
            )
        )

    session.add_all(products)
    await session.commit()
    print(f"  Created {len(products)} products")
    return products


async def seed_orders(session: AsyncSession, clients: list[User], products: list[Product]) -> int:
    """One order per lifecycle state."""
    print("Seeding orders...")

    result = await session.execute(select(Order).limit(1))
    if result.scalar_one_or_none():
        print("  Orders already exist, skipping...")
        return 0

    orders = []
    for index, status in enumerate(OrderStatus):
        product = products[index % len(products)]
        client = clients[index % len(clients)]
        orders.append(
            Order(
                client_id=client.user_id,
                provider_id=product.provider_id,
                total_amount=product.price_per_day * 2,
                deposit_paid=product.deposit_amount,
                event_date=date.today() + timedelta(days=7 * (index + 1)),
                event_location=client.location,
                notes=f"Commande de démonstration ({status.value})",
                status=status.value,
            )
        )

    session.add_all(orders)
    await session.commit()
    print(f"  Created {len(orders)} orders")
    return len(orders)


async def main():
    """Main seed function."""
    print("=" * 60)
    print("YAFOY - Seed Data Script")
    print("=" * 60)
    print(f"  RESET_DATA: {RESET_DATA}")
    print(f"  CLIENT_COUNT: {CLIENT_COUNT}")
    print("=" * 60)

    async with async_session_maker() as session:
        if RESET_DATA:
            await reset_marketplace_data(session)

        users = await seed_users(session)
        products = await seed_products(session, users.get(UserRole.PROVIDER.value, []))
        order_count = await seed_orders(session, users.get(UserRole.CLIENT.value, []), products)

    print("=" * 60)
    print("Seed data complete!")
    for role, members in users.items():
        print(f"  {role}: {len(members)}")
    print(f"  Products: {len(products)}")
    print(f"  Orders: {order_count}")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
