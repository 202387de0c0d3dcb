from __future__ import annotations

import pytest

from recondiff.domain.matching import MatcherConfig, classify_fields
from recondiff.domain.model import (
    DataType,
    EntitySchema,
    FieldDef,
    PlaintextAlphabet,
    RichtextAlphabet,
    TypeDef,
)

TASK_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "tags",
    "project",
    "dueDate",
    "completedAt",
    "price",
    "favorite",
)


def build_schema() -> EntitySchema:
    fields = [
        FieldDef(key="type", data_type=DataType.PLAINTEXT, immutable=True),
        FieldDef(
            key="title",
            data_type=DataType.PLAINTEXT,
            plaintext_alphabet=PlaintextAlphabet.LINE,
        ),
        FieldDef(
            key="description",
            data_type=DataType.RICHTEXT,
            richtext_alphabet=RichtextAlphabet.BLOCK,
        ),
        FieldDef(
            key="status",
            data_type=DataType.OPTION,
            options=("pending", "active", "complete", "cancelled"),
        ),
        FieldDef(key="priority", data_type=DataType.OPTION, options=("low", "medium", "high")),
        FieldDef(key="tags", data_type=DataType.PLAINTEXT, allow_multiple=True),
        FieldDef(key="project", data_type=DataType.RELATION, range=("Project",)),
        FieldDef(
            key="tasks",
            data_type=DataType.RELATION,
            range=("Task",),
            allow_multiple=True,
        ),
        FieldDef(key="members", data_type=DataType.RELATION, range=("User",), allow_multiple=True),
        FieldDef(key="dueDate", data_type=DataType.DATE),
        FieldDef(key="completedAt", data_type=DataType.DATETIME),
        FieldDef(key="price", data_type=DataType.DECIMAL),
        FieldDef(key="favorite", data_type=DataType.BOOLEAN),
        FieldDef(key="email", data_type=DataType.PLAINTEXT, unique=True),
        FieldDef(key="name", data_type=DataType.PLAINTEXT),
    ]
    types = [
        TypeDef(key="Task", fields=TASK_FIELDS),
        TypeDef(key="Project", fields=("title", "description", "status", "tasks", "members")),
        TypeDef(key="User", fields=("name", "email")),
        TypeDef(key="Team", fields=("name", "members")),
    ]
    return EntitySchema(
        fields={field_def.key: field_def for field_def in fields},
        types={type_def.key: type_def for type_def in types},
    )


@pytest.fixture(scope="session")
def schema() -> EntitySchema:
    return build_schema()


@pytest.fixture(scope="session")
def matcher_config(schema: EntitySchema) -> MatcherConfig:
    return MatcherConfig(schema=schema, classifications=classify_fields(schema))


@pytest.fixture
def task1() -> dict[str, object]:
    return {
        "uid": "task1",
        "type": "Task",
        "title": "Implement user authentication",
        "status": "pending",
        "tags": ["urgent", "important"],
    }


@pytest.fixture
def task2() -> dict[str, object]:
    return {
        "uid": "task2",
        "type": "Task",
        "title": "Write API documentation",
        "status": "active",
        "tags": ["docs"],
    }


@pytest.fixture
def project(task1: dict[str, object], task2: dict[str, object]) -> dict[str, object]:
    return {
        "uid": "project1",
        "type": "Project",
        "title": "Binder Core",
        "status": "active",
        "tasks": [task1, task2],
    }
