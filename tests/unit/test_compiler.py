"""Unit tests for the statement compiler."""

from __future__ import annotations

import pytest

from row_repo.core import conditions
from row_repo.core.compiler import (
    DEFAULT,
    InsertConfiguration,
    SelectConfiguration,
    UpdateConfiguration,
    compile_insert,
    compile_select,
    compile_update,
)
from row_repo.core.exceptions import (
    AtLeastOneValueRequiredError,
    ParameterBindingError,
    UpdatedValuesRequiredError,
)
from row_repo.core.fragment import SqlFragment


class TestCompileSelect:
    def test_default_select(self) -> None:
        stmt = compile_select("users", SelectConfiguration())
        assert stmt.sql == 'SELECT "users".* FROM "users";'
        assert stmt.params == ()

    def test_where_numbered_in_order(self) -> None:
        where = conditions.and_(
            [conditions.value("a", "=", 1), conditions.in_("b", ["x", "y"])]
        )
        stmt = compile_select("t", SelectConfiguration(where=where))
        assert stmt.sql == 'SELECT "t".* FROM "t" WHERE (a = $1 AND b IN ($2,$3));'
        assert stmt.values == (1, "x", "y")

    def test_clauses_in_fixed_order(self) -> None:
        config = SelectConfiguration(
            select=SqlFragment("id, name"),
            join=SqlFragment.raw('INNER JOIN "o" ON "o".uid = "t".id AND "o".kind = ?', ["a"]),
            where=conditions.value("id", ">", 3),
        )
        stmt = compile_select("t", config)
        assert stmt.sql == (
            'SELECT id, name FROM "t" INNER JOIN "o" ON "o".uid = "t".id AND "o".kind = $1'
            " WHERE id > $2;"
        )
        assert stmt.values == ("a", 3)

    def test_relation_select_and_joins(self) -> None:
        stmt = compile_select(
            "t",
            SelectConfiguration(),
            relation_select=['"r"."id" AS "r.id"'],
            relation_joins=[SqlFragment('LEFT JOIN "u" AS "r" ON "t"."uid" = "r"."id"')],
        )
        assert stmt.sql == (
            'SELECT "t".*, "r"."id" AS "r.id" FROM "t"'
            ' LEFT JOIN "u" AS "r" ON "t"."uid" = "r"."id";'
        )

    def test_compilation_is_pure(self) -> None:
        config = SelectConfiguration(where=conditions.in_("id", [1, 2, 3]))
        assert compile_select("t", config) == compile_select("t", config)

    def test_question_mark_in_literal_is_not_a_marker(self) -> None:
        stmt = compile_select("t", SelectConfiguration(where=conditions.value("note", "<>", "?")))
        assert stmt.sql == 'SELECT "t".* FROM "t" WHERE note <> $1;'

    def test_marker_count_mismatch_raises(self) -> None:
        with pytest.raises(ParameterBindingError):
            compile_select("t", SelectConfiguration(where=SqlFragment("a = ? AND b = ?")))


class TestCompileInsert:
    def test_multiple_rows(self) -> None:
        config = InsertConfiguration(values=[(1, "a"), (2, "b")])
        stmt = compile_insert("t", ["id", "name"], config)
        assert stmt.sql == 'INSERT INTO "t" ("id","name") VALUES ($1,$2),($3,$4);'
        assert stmt.values == (1, "a", 2, "b")

    def test_returning_numbered_after_values(self) -> None:
        config = InsertConfiguration(
            values=[("a",)],
            returning=SqlFragment.raw("*, ? AS tag", ["new"]),
        )
        stmt = compile_insert("t", ["name"], config)
        assert stmt.sql == 'INSERT INTO "t" ("name") VALUES ($1) RETURNING *, $2 AS tag;'
        assert stmt.values == ("a", "new")

    def test_default_binds_nothing(self) -> None:
        config = InsertConfiguration(values=[(DEFAULT, "a")])
        stmt = compile_insert("t", ["id", "name"], config)
        assert stmt.sql == 'INSERT INTO "t" ("id","name") VALUES (DEFAULT,$1);'
        assert stmt.values == ("a",)

    def test_no_rows_raises(self) -> None:
        with pytest.raises(AtLeastOneValueRequiredError):
            compile_insert("t", ["name"], InsertConfiguration())


class TestCompileUpdate:
    def test_set_where_returning(self) -> None:
        config = UpdateConfiguration(
            values={"name": "n", "amount": 3.5},
            where=conditions.value("id", "=", 7),
            returning=SqlFragment("*"),
        )
        stmt = compile_update("models", config)
        assert stmt.sql == (
            'UPDATE "models" SET "name"=$1,"amount"=$2 WHERE id = $3 RETURNING *;'
        )
        assert stmt.values == ("n", 3.5, 7)

    def test_without_where(self) -> None:
        stmt = compile_update("t", UpdateConfiguration(values={"a": None}))
        assert stmt.sql == 'UPDATE "t" SET "a"=$1;'
        assert stmt.values == (None,)

    @pytest.mark.parametrize("values", [None, {}])
    def test_no_values_raises(self, values) -> None:
        with pytest.raises(UpdatedValuesRequiredError):
            compile_update("t", UpdateConfiguration(values=values))
