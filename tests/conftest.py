import pytest

from strata import BOOLEAN, INTEGER, STRING, TEXT, Database, EnumType, FieldDefinition, Model

USER_FIELDS = [
    FieldDefinition(name="name", type=STRING, required=True),
    FieldDefinition(name="account", type=STRING, required=True, unique=True),
    FieldDefinition(name="age", type=INTEGER),
    FieldDefinition(name="married", type=BOOLEAN, required=True),
]

POST_FIELDS = [
    FieldDefinition(name="title", type=STRING, required=True),
    FieldDefinition(name="content", type=TEXT),
    FieldDefinition(name="user_id", type=INTEGER, required=True),
]

TASK_STATES = ["active", "inactive", "destroyed"]


@pytest.fixture
def db_file(tmp_path):
    """Path of a fresh SQLite file for each test."""
    return tmp_path / "strata_test.sqlite3"


@pytest.fixture
def users(db_file):
    """Users model on its own connection."""
    model = Model("users", USER_FIELDS, database=db_file)
    yield model
    model.close()


@pytest.fixture
def posts(db_file, users):
    """Posts model related to users through posts.user_id."""
    model = Model("posts", POST_FIELDS, database=db_file)
    users.has_many(model, foreign_key="user_id")
    model.belongs_to(users, foreign_key="user_id")
    yield model
    model.close()


@pytest.fixture
def tasks(tmp_path):
    """Model with a required enum column, on a shared Database."""
    database = Database(tmp_path / "tasks.sqlite3")
    model = Model(
        "tasks",
        [
            FieldDefinition(name="title", type=STRING),
            FieldDefinition(name="state", type=EnumType(TASK_STATES), required=True),
        ],
        database=database,
    )
    yield model
    database.close()


@pytest.fixture
def seeded(users, posts):
    """10 users and 50 posts; post i belongs to user i % 4 + 1."""
    for i in range(1, 11):
        users.create(name="Maxwell", account=f"maxwell-{i}", age=i * 3, married=False)
    for i in range(1, 51):
        posts.create(title=f"Cats {i}", content="cat cat cat cat cat", user_id=i % 4 + 1)
    return users, posts
