"""
Blog Example

This example declares users and posts over one SQLite file, links them with
has_many / belongs_to, and walks a record through its lifecycle while
printing every statement that strata issues.

Run with: python examples/blog_example.py
"""

import tempfile
from pathlib import Path

from strata import (
    BOOLEAN,
    INTEGER,
    STRING,
    TEXT,
    Database,
    EnumType,
    FieldDefinition,
    Model,
    track_queries,
)
from strata.log import configure_logging


def declare_models(database: Database) -> tuple[Model, Model]:
    users = Model(
        "users",
        [
            FieldDefinition(name="name", type=STRING, required=True),
            FieldDefinition(name="account", type=STRING, required=True, unique=True),
            FieldDefinition(name="age", type=INTEGER),
            FieldDefinition(name="married", type=BOOLEAN, required=True, default=False),
        ],
        database=database,
    )
    posts = Model(
        "posts",
        [
            FieldDefinition(name="title", type=STRING, required=True),
            FieldDefinition(name="content", type=TEXT),
            FieldDefinition(name="user_id", type=INTEGER, required=True),
            FieldDefinition(
                name="status",
                type=EnumType(["draft", "review", "published"]),
                required=True,
                default="draft",
            ),
        ],
        database=database,
    )
    users.has_many(posts, foreign_key="user_id")
    posts.belongs_to(users, foreign_key="user_id")
    return users, posts


def record_lifecycle(users: Model, posts: Model):
    """New -> Saved -> Dirty -> Saved -> Destroyed"""
    print("\n=== Record Lifecycle ===")

    user = users.new(name="Maxwell", account="maxwell-1")
    print(f"new:       {user!r} valid={user.valid}")

    user.save()
    print(f"saved:     {user!r} created={user.created}")

    user.age = 18
    print(f"dirty:     {user!r}")

    user.save()
    user.mutate(lambda u: u.set("age", u.age + 1))
    print(f"mutated:   {user!r} age={user.age}")

    for i in range(3):
        posts.create(title=f"Cats {i}", content="cat cat cat", user_id=user.id)

    print(f"posts:     {user.posts}")
    print(f"owner:     {posts.find(1).user!r}")

    post = posts.find(1)
    post.status.next(save=True)
    print(f"status:    {post.status} (review={post.status.review})")


def queries(users: Model):
    """OR across where() calls, AND inside one call"""
    print("\n=== Queries ===")

    for i in range(2, 8):
        users.create(name="Maxwell", account=f"maxwell-{i}", age=i * 3)

    query = users.where(account="maxwell-2").where({"age": {"gt": 10, "lt": 20}})
    print(query)
    print(f"ids: {query.evaluate().ids}")

    print(users.last(2))
    print(f"ids: {users.last(2).evaluate().ids}")


def batch_operations(users: Model):
    """One UPDATE or DELETE for a whole collection"""
    print("\n=== Batch Operations ===")

    with track_queries() as tracker:
        older = users.where({"age": {"gte": 15}}).evaluate()
        older.mutate(lambda batch: batch.set("married", True))
        older.destroy()

    for i, statement in enumerate(tracker.statements(), 1):
        print(f"Query {i}: {statement}")


def main():
    configure_logging(level="INFO")

    with tempfile.TemporaryDirectory() as directory:
        with Database(Path(directory) / "blog.sqlite3") as database:
            users, posts = declare_models(database)
            record_lifecycle(users, posts)
            queries(users)
            batch_operations(users)


if __name__ == "__main__":
    main()
