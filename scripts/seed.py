"""Fill the blog database with demo users, articles and comments."""
import argparse
import asyncio
import random
import time

from blog.categories import Category
from blog.database import engine, async_session, Base
from blog.models import User, Article, Comment
from blog.security import hash_password

TAGS = ["python", "fastapi", "postgresql", "design", "career", "travel",
        "photography", "music", "startups", "learning", "opinion", "community"]

AUTHORS = ["Ana", "Bruno", "Carla", "Diego", "Elena", "Fabio"]

DEMO_PASSWORD = "demo1234"


async def seed(small: bool = False, reset: bool = False):
    num_articles = 20 if small else 500
    max_comments = 3 if small else 8

    print(f"Seeding: {len(AUTHORS)} users, {num_articles} articles, up to {max_comments} comments each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        # One hash is enough; every demo account shares the password.
        password_hash = await hash_password(DEMO_PASSWORD)
        for name in AUTHORS:
            session.add(User(name=name, email=f"{name.lower()}@example.com", password_hash=password_hash))
        await session.flush()
        print(f"  Created {len(AUTHORS)} users (password: {DEMO_PASSWORD})")

        categories = list(Category)
        articles = []
        for i in range(num_articles):
            category = random.choice(categories)
            article = Article(
                title=f"Notes on {category.value} #{i}",
                content=f"This is demo article {i} about {category.value.lower()}. " * 10,
                author=random.choice(AUTHORS),
                category=category,
                tags=random.sample(TAGS, k=random.randint(0, 4)),
            )
            session.add(article)
            articles.append(article)
        await session.flush()
        print(f"  Created {len(articles)} articles")

        total_comments = 0
        for article in articles:
            for _ in range(random.randint(0, max_comments)):
                session.add(Comment(
                    article_id=article.id,
                    author_name=random.choice(AUTHORS),
                    content=f"Thanks for writing about {article.category.value.lower()}!",
                ))
                total_comments += 1
        await session.commit()

    await engine.dispose()
    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s ({total_comments} comments)")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 articles)")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small, reset=args.reset))


if __name__ == "__main__":
    main()
