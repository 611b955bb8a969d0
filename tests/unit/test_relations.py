"""Unit tests for relationship descriptors and their resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from row_repo.core.enums import RelationKind, RelationStrategy
from row_repo.core.exceptions import RelationshipDefinitionError
from row_repo.relations import many, one
from row_repo.relations import resolver
from row_repo.repository.config import RepositoryConfig, table_model


@dataclass
class User:
    id: int
    name: str
    posts: list[Any] | None = None
    profile: Any = None
    groups: list[Any] | None = None


@dataclass
class Post:
    id: int
    user_id: int | None
    title: str
    author: Any = None


@dataclass
class Profile:
    id: int
    user_id: int
    bio: str


@dataclass
class Group:
    id: int
    label: str


USERS = table_model(User, "users", columns=["id", "name"])
POSTS = table_model(Post, "posts", columns=["id", "user_id", "title"])
PROFILES = table_model(Profile, "profiles")
GROUPS = table_model(Group, "groups")


class TestDefaults:
    def test_one_direct_defaults_model_key_to_target_key(self) -> None:
        rel = one("author", POSTS, USERS, foreign_key="user_id")
        assert rel.kind is RelationKind.ONE
        assert rel.strategy is RelationStrategy.DIRECT
        assert rel.model_key == "id"
        assert rel.parent_key == "user_id"

    def test_one_direct_requires_foreign_key(self) -> None:
        with pytest.raises(RelationshipDefinitionError, match="foreign_key"):
            one("author", POSTS, USERS)

    def test_one_reverse_defaults(self) -> None:
        rel = one("profile", USERS, PROFILES, strategy="reverse", foreign_key="user_id")
        assert rel.model_key == "id"
        assert rel.parent_key == "id"

    def test_many_requires_foreign_key(self) -> None:
        with pytest.raises(RelationshipDefinitionError):
            many("posts", USERS, POSTS)

    def test_many_reverse_behaves_like_direct(self) -> None:
        direct = many("posts", USERS, POSTS, foreign_key="user_id")
        reverse = many("posts", USERS, POSTS, strategy=RelationStrategy.REVERSE, foreign_key="user_id")
        assert (direct.foreign_key, direct.model_key) == (reverse.foreign_key, reverse.model_key)
        assert resolver.batch_statement(direct, [1]).sql == resolver.batch_statement(reverse, [1]).sql

    def test_through_implied_by_pivot(self) -> None:
        rel = many(
            "groups", USERS, GROUPS,
            through="user_groups", pivot_foreign_key="user_id", pivot_model_key="group_id",
        )
        assert rel.strategy is RelationStrategy.THROUGH
        assert (rel.foreign_key, rel.model_key) == ("id", "id")

    def test_through_requires_pivot_columns(self) -> None:
        with pytest.raises(RelationshipDefinitionError, match="pivot_model_key"):
            many("groups", USERS, GROUPS, through="user_groups", pivot_foreign_key="user_id")

    def test_unknown_column_rejected(self) -> None:
        with pytest.raises(RelationshipDefinitionError, match="not declared"):
            one("author", POSTS, USERS, foreign_key="writer_id")

    def test_composite_key_needs_explicit_keys(self) -> None:
        composite = RepositoryConfig(
            table="pairs", key=("a", "b"), columns=("a", "b"), from_row=dict
        )
        with pytest.raises(RelationshipDefinitionError, match="composite"):
            one("pair", POSTS, composite, foreign_key="user_id")

    def test_many_is_never_inline(self) -> None:
        rel = many("posts", USERS, POSTS, foreign_key="user_id")
        assert not rel.can_inline()
        assert one("author", POSTS, USERS, foreign_key="user_id").can_inline()
        assert not one("author", POSTS, USERS, foreign_key="user_id").can_inline(lazy=True)


class TestInline:
    def test_direct_join(self) -> None:
        rel = one("author", POSTS, USERS, foreign_key="user_id")
        assert resolver.inline_select(rel) == [
            '"relations.author"."id" AS "relations.author.id"',
            '"relations.author"."name" AS "relations.author.name"',
        ]
        [join] = resolver.inline_joins(rel)
        assert join.text == (
            'LEFT JOIN "users" AS "relations.author"'
            ' ON "posts"."user_id" = "relations.author"."id"'
        )

    def test_reverse_join(self) -> None:
        rel = one("profile", USERS, PROFILES, strategy="reverse", foreign_key="user_id")
        [join] = resolver.inline_joins(rel)
        assert join.text == (
            'LEFT JOIN "profiles" AS "relations.profile"'
            ' ON "users"."id" = "relations.profile"."user_id"'
        )

    def test_through_joins_pivot_first(self) -> None:
        rel = one(
            "group", USERS, GROUPS,
            through="user_groups", pivot_foreign_key="user_id", pivot_model_key="group_id",
        )
        pivot, target = resolver.inline_joins(rel)
        assert pivot.text == (
            'LEFT JOIN "user_groups" AS "relations.group.pivot"'
            ' ON "users"."id" = "relations.group.pivot"."user_id"'
        )
        assert target.text == (
            'LEFT JOIN "groups" AS "relations.group"'
            ' ON "relations.group.pivot"."group_id" = "relations.group"."id"'
        )


class TestBatch:
    def test_one_direct_filters_on_model_key(self) -> None:
        rel = one("author", POSTS, USERS, foreign_key="user_id")
        stmt = resolver.batch_statement(rel, [1, 2])
        assert stmt.sql == (
            'SELECT "users".*, "users"."id" AS "__relation_key" FROM "users"'
            ' WHERE "users"."id" IN ($1,$2);'
        )
        assert stmt.values == (1, 2)

    def test_many_filters_on_foreign_key(self) -> None:
        rel = many("posts", USERS, POSTS, foreign_key="user_id")
        stmt = resolver.batch_statement(rel, [5])
        assert stmt.sql == (
            'SELECT "posts".*, "posts"."user_id" AS "__relation_key" FROM "posts"'
            ' WHERE "posts"."user_id" IN ($1);'
        )

    def test_through_uses_pivot(self) -> None:
        rel = many(
            "groups", USERS, GROUPS,
            through="user_groups", pivot_foreign_key="user_id", pivot_model_key="group_id",
        )
        stmt = resolver.batch_statement(rel, [1])
        assert stmt.sql == (
            'SELECT "groups".*, "relation_pivot"."user_id" AS "__relation_key" FROM "groups"'
            ' INNER JOIN "user_groups" AS "relation_pivot"'
            ' ON "groups"."id" = "relation_pivot"."group_id"'
            ' WHERE "relation_pivot"."user_id" IN ($1);'
        )

    def test_collect_keys_skips_nulls_and_duplicates(self) -> None:
        rel = one("author", POSTS, USERS, foreign_key="user_id")
        rows = [{"user_id": 2}, {"user_id": None}, {"user_id": 1}, {"user_id": 2}]
        assert resolver.collect_keys(rel, rows) == [2, 1]

    def test_load_many_single_query(self, recording_connector) -> None:
        rel = many("posts", USERS, POSTS, foreign_key="user_id")
        rows = [{"id": i, "name": f"u{i}"} for i in range(1, 51)]
        users = [User(**row) for row in rows]

        def respond(statement):
            return [
                {"id": 100, "user_id": 3, "title": "a", "__relation_key": 3},
                {"id": 101, "user_id": 3, "title": "b", "__relation_key": 3},
            ]

        connector = recording_connector(respond)
        resolver.load(connector, rel, users, rows)

        assert len(connector.statements) == 1
        assert len(connector.statements[0].params) == 50
        assert [p.title for p in users[2].posts] == ["a", "b"]
        assert all(u.posts == [] for u in users if u.id != 3)

    def test_load_one_missing_gives_none(self, recording_connector) -> None:
        rel = one("author", POSTS, USERS, foreign_key="user_id")
        rows = [{"id": 1, "user_id": 9, "title": "x"}, {"id": 2, "user_id": 4, "title": "y"}]
        posts = [Post(**row) for row in rows]
        connector = recording_connector(
            lambda statement: [{"id": 4, "name": "dora", "__relation_key": 4}]
        )
        resolver.load(connector, rel, posts, rows)

        assert posts[0].author is None
        assert posts[1].author == User(id=4, name="dora")

    def test_load_without_keys_runs_nothing(self, recording_connector) -> None:
        rel = one("author", POSTS, USERS, foreign_key="user_id")
        rows = [{"id": 1, "user_id": None, "title": "x"}]
        posts = [Post(**row) for row in rows]
        connector = recording_connector()
        resolver.load(connector, rel, posts, rows)

        assert connector.statements == []
        assert posts[0].author is None
