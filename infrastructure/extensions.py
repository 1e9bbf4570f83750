# ============================================================================
# POSTGRESQL EXTENSIONS ADAPTER
# ============================================================================
# STATUS: Infrastructure - Executes generated DDL against a live server
# PURPOSE: One method per DDL operation, dry-run recording, catalog lookups
# ============================================================================
"""
PostgreSQL Extensions Adapter

Thin execution layer over the core.ddl builders. Every operation builds
its statement(s), logs them, records the rendered text in `statements`
and runs them on one cursor inside a transaction block, unless the
adapter is in dry-run mode.

Cursors come from, in order of preference:
- an explicit psycopg connection, which the caller keeps open
  (required for set_role and reset_role)
- an explicit PostgreSQLRepository (pooled or direct)
- the shared repository from get_postgres_repository()

Usage:
    from infrastructure.extensions import PostgreSQLExtensions

    pg = PostgreSQLExtensions(dry_run=True)
    pg.create_table("foos", lambda t: t.string("name", null=False))
    pg.add_foreign_key("bars", "foo_id", "foos")
    print("\\n".join(pg.statements))

    live = PostgreSQLExtensions()
    live.detect_features()
    with live.with_schema("reporting"):
        live.create_view("daily", "SELECT 1")
"""

from contextlib import contextmanager
from typing import Any, Callable, List, Optional

import psycopg
from psycopg import sql

from core.config import get_defaults
from core.ddl import (
    CheckConstraint,
    ConstraintBuilder,
    CopyFromDefinition,
    EventTriggerBuilder,
    EventTriggerDefinition,
    ExcludeConstraint,
    ExtensionAlterer,
    ExtensionBuilder,
    ForeignKeyConstraint,
    FunctionAlterer,
    FunctionBuilder,
    FunctionDefinition,
    GeometryBuilder,
    GrantPrivilege,
    IndexBuilder,
    IndexDefinition,
    LanguageBuilder,
    MaterializedViewAlterer,
    MaterializedViewBuilder,
    MaterializedViewDefinition,
    PrimaryKeyConstraint,
    RevokePrivilege,
    RoleBuilder,
    RoleDefinition,
    RoleMembershipBuilder,
    RuleBuilder,
    RuleDefinition,
    SchemaBuilder,
    SequenceBuilder,
    SequenceDefinition,
    TableBuilder,
    TableDefinition,
    TablespaceBuilder,
    TextSearchBuilder,
    TriggerBuilder,
    TriggerDefinition,
    TypeBuilder,
    UniqueConstraint,
    VacuumDefinition,
    ViewAlterer,
    ViewBuilder,
    ViewDefinition,
)
from core.ddl.constraints import Constraint
from core.ddl.permissions import PRIVILEGE_TYPES
from core.ddl.text_search import CONFIGURATION, DICTIONARY, PARSER, TEMPLATE
from core.errors import SessionConnectionRequired
from core.features import Features, resolve_features
from core.logging import ComponentType, get_logger, log_context, log_statement
from core.models import ForeignKeyReference, PostGISVersion
from core.quoting import current_scoped_schema, ignore_scoped_schema, with_schema
from infrastructure.catalog import (
    CatalogQueries,
    first_column,
    foreign_key_rows,
    postgis_version_row,
    row_values,
)
from infrastructure.postgresql import PostgreSQLRepository, get_postgres_repository


def _flatten(statement: Any):
    if isinstance(statement, (list, tuple)):
        for stmt in statement:
            yield from _flatten(stmt)
    else:
        yield statement


class PostgreSQLExtensions:
    """
    DDL operations against one database.

    Args:
        connection: Optional psycopg connection to run statements on
        repository: Optional repository to borrow cursors from
        features: Server capabilities (defaults to configured versions)
        dry_run: Record and log statements without executing them
    """

    def __init__(
        self,
        connection: Optional[psycopg.Connection] = None,
        repository: Optional[PostgreSQLRepository] = None,
        features: Optional[Features] = None,
        dry_run: bool = False,
    ):
        self.connection = connection
        self.repository = repository
        self.features = resolve_features(features)
        self.dry_run = dry_run
        self.statements: List[str] = []
        self.logger = get_logger(__name__, ComponentType.ADAPTER)

    # ========================================================================
    # EXECUTION
    # ========================================================================

    @contextmanager
    def _cursor(self):
        """
        Cursor inside a transaction block on a single connection.

        Everything run on the cursor commits together when the block
        exits and rolls back together on error.
        """
        if self.connection is not None:
            with self.connection.transaction(), self.connection.cursor() as cur:
                yield cur
            return

        repository = self.repository or get_postgres_repository()
        with repository.get_connection() as conn:
            with conn.transaction(), conn.cursor() as cur:
                yield cur

    @contextmanager
    def _error_context(self, operation: str, statement: str):
        """Log driver errors with the failing statement, then re-raise."""
        try:
            yield
        except psycopg.Error as e:
            self.logger.error(
                f"{operation} failed: {e}",
                extra={"statement": statement, "error_type": type(e).__name__},
            )
            raise

    def _record(self, statement: sql.Composable) -> str:
        text = statement.as_string(None)
        self.statements.append(text)
        log_statement(text, dry_run=self.dry_run, logger=self.logger)
        return text

    def execute(self, statement: Any) -> None:
        """
        Run a composed statement, or a list of them in order.

        A list runs on one connection in one transaction, so a failing
        statement leaves none of the others applied. In dry-run mode
        statements are only recorded and logged.
        """
        statements = list(_flatten(statement))
        texts = [self._record(stmt) for stmt in statements]
        if self.dry_run or not statements:
            return

        with self._cursor() as cur:
            for stmt, text in zip(statements, texts):
                with self._error_context("execute", text):
                    cur.execute(stmt)

    def query(self, statement: sql.Composable) -> list:
        """Run a SELECT and return its rows ([] in dry-run mode)."""
        text = self._record(statement)
        if self.dry_run:
            return []

        with self._error_context("query", text):
            with self._cursor() as cur:
                cur.execute(statement)
                return cur.fetchall()

    def _run(
        self,
        operation: str,
        statement: Any,
        object_type: Optional[str] = None,
        object_name: Any = None,
    ) -> None:
        with log_context(
            operation=operation,
            object_type=object_type,
            object_name=str(object_name) if object_name is not None else None,
            schema=current_scoped_schema(),
        ):
            self.execute(statement)

    # ========================================================================
    # SCHEMA SCOPING
    # ========================================================================

    @staticmethod
    def with_schema(schema: Optional[str]):
        return with_schema(schema)

    @staticmethod
    def ignore_scoped_schema():
        return ignore_scoped_schema()

    # ========================================================================
    # TABLES
    # ========================================================================

    def create_table(
        self,
        name: Any,
        definition: Optional[Callable[[TableDefinition], Any]] = None,
        **options: Any,
    ) -> None:
        """
        CREATE TABLE, with columns and constraints added by a callback.

        Example:
            pg.create_table("foos", lambda t: (
                t.string("name", null=False),
                t.foreign_key("bar_id", "bars"),
            ))
        """
        table = TableDefinition(name, self.features, **options)
        if definition is not None:
            definition(table)
        self._run("create_table", table.statements(), "table", name)

    def drop_table(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_table",
            TableBuilder.drop(*names, if_exists=if_exists, cascade=cascade),
            "table",
            ", ".join(str(n) for n in names),
        )

    def rename_table(self, name: Any, new_name: Any) -> None:
        self._run("rename_table", TableBuilder.rename(name, new_name), "table", name)

    def alter_table_schema(self, name: Any, schema: str) -> None:
        self._run("alter_table_schema", TableBuilder.set_schema(name, schema), "table", name)

    def add_column(
        self,
        table: Any,
        column: str,
        sql_type: str,
        default: Any = None,
        null: Optional[bool] = None,
    ) -> None:
        self._run(
            "add_column",
            TableBuilder.add_column(table, column, sql_type, default=default, null=null),
            "table",
            table,
        )

    def change_column(
        self,
        table: Any,
        column: str,
        sql_type: str,
        default: Any = None,
        null: Optional[bool] = None,
    ) -> None:
        self._run(
            "change_column",
            TableBuilder.change_column(table, column, sql_type, default=default, null=null),
            "table",
            table,
        )

    def change_column_default(self, table: Any, column: str, default: Any) -> None:
        self._run(
            "change_column_default",
            TableBuilder.change_column_default(table, column, default),
            "table",
            table,
        )

    def change_column_null(self, table: Any, column: str, null: bool, default: Any = None) -> None:
        self._run(
            "change_column_null",
            TableBuilder.change_column_null(table, column, null, default),
            "table",
            table,
        )

    def enable_triggers(self, table: Any, *triggers: str) -> None:
        self._run("enable_triggers", TableBuilder.set_triggers(table, True, *triggers), "table", table)

    def disable_triggers(self, table: Any, *triggers: str) -> None:
        self._run("disable_triggers", TableBuilder.set_triggers(table, False, *triggers), "table", table)

    @contextmanager
    def without_triggers(self, table: Any, *triggers: str):
        """Disable triggers for the block and re-enable them afterwards, even on error."""
        self.disable_triggers(table, *triggers)
        try:
            yield
        finally:
            self.enable_triggers(table, *triggers)

    def cluster(self, table: Any = None, using: Optional[str] = None, verbose: bool = False) -> None:
        self._run("cluster", TableBuilder.cluster(table, using=using, verbose=verbose), "table", table)

    def cluster_all(self, verbose: bool = False) -> None:
        self._run("cluster_all", TableBuilder.cluster(verbose=verbose))

    # ========================================================================
    # CONSTRAINTS
    # ========================================================================

    def add_constraint(self, table: Any, constraint: Constraint) -> None:
        self._run("add_constraint", ConstraintBuilder.add(table, constraint), "constraint", table)

    def add_check_constraint(self, table: Any, expression: str, **options: Any) -> None:
        self.add_constraint(table, CheckConstraint(expression, **options))

    def add_unique_constraint(self, table: Any, columns: Any, **options: Any) -> None:
        self.add_constraint(table, UniqueConstraint(columns, **options))

    def add_primary_key_constraint(self, table: Any, columns: Any, **options: Any) -> None:
        self.add_constraint(table, PrimaryKeyConstraint(columns, **options))

    def add_foreign_key(
        self,
        table: Any,
        columns: Any,
        ref_table: Any,
        ref_columns: Any = None,
        **options: Any,
    ) -> None:
        self.add_constraint(table, ForeignKeyConstraint(columns, ref_table, ref_columns, **options))

    def add_exclude_constraint(self, table: Any, excludes: Any, **options: Any) -> None:
        self.add_constraint(table, ExcludeConstraint(excludes, **options))

    def drop_constraint(self, table: Any, name: str, cascade: bool = False) -> None:
        self._run("drop_constraint", ConstraintBuilder.drop(table, name, cascade=cascade), "constraint", name)

    def validate_constraint(self, table: Any, name: str) -> None:
        self._run("validate_constraint", ConstraintBuilder.validate(table, name), "constraint", name)

    # ========================================================================
    # INDEXES
    # ========================================================================

    def create_index(self, name: str, table: Any, columns: Any, **options: Any) -> None:
        self._run("create_index", IndexDefinition(name, table, columns, **options).to_sql(), "index", name)

    def drop_index(
        self,
        *names: Any,
        concurrently: bool = False,
        if_exists: bool = False,
        cascade: bool = False,
    ) -> None:
        self._run(
            "drop_index",
            IndexBuilder.drop(*names, concurrently=concurrently, if_exists=if_exists, cascade=cascade),
            "index",
            ", ".join(str(n) for n in names),
        )

    def rename_index(self, name: str, new_name: str) -> None:
        self._run("rename_index", IndexBuilder.rename(name, new_name), "index", name)

    def alter_index_tablespace(self, name: str, tablespace: str) -> None:
        self._run("alter_index_tablespace", IndexBuilder.set_tablespace(name, tablespace), "index", name)

    # ========================================================================
    # FUNCTIONS
    # ========================================================================

    def create_function(
        self,
        name: Any,
        args: Any,
        returns: str,
        language: str,
        body: Any,
        **options: Any,
    ) -> None:
        self._run(
            "create_function",
            FunctionDefinition(name, args, returns, language, body, **options).to_sql(),
            "function",
            name,
        )

    def drop_function(self, name: Any, args: Any = None, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_function",
            FunctionBuilder.drop(name, args, if_exists=if_exists, cascade=cascade),
            "function",
            name,
        )

    def alter_function(
        self,
        name: Any,
        args: Any = None,
        definition: Optional[Callable[[FunctionAlterer], Any]] = None,
        **actions: Any,
    ) -> None:
        alterer = FunctionAlterer(name, args, **actions)
        if definition is not None:
            definition(alterer)
        if alterer.empty():
            return
        self._run("alter_function", alterer.to_sql(), "function", name)

    def rename_function(self, name: Any, args: Any, new_name: Any) -> None:
        self.alter_function(name, args, rename_to=new_name)

    def alter_function_owner(self, name: Any, args: Any, role: Any) -> None:
        self.alter_function(name, args, owner_to=role)

    def alter_function_schema(self, name: Any, args: Any, schema: Any) -> None:
        self.alter_function(name, args, set_schema=schema)

    # ========================================================================
    # VIEWS
    # ========================================================================

    def create_view(self, name: Any, query: str, **options: Any) -> None:
        self._run("create_view", ViewDefinition(name, query, self.features, **options).to_sql(), "view", name)

    def drop_view(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_view",
            ViewBuilder.drop(*names, if_exists=if_exists, cascade=cascade),
            "view",
            ", ".join(str(n) for n in names),
        )

    def alter_view(self, name: Any, if_exists: Optional[bool] = None, **actions: Any) -> None:
        alterer = ViewAlterer(name, self.features, if_exists=if_exists, **actions)
        self._run("alter_view", alterer.to_sql(), "view", name)

    def rename_view(self, name: Any, new_name: Any, **options: Any) -> None:
        self.alter_view(name, rename_to=new_name, **options)

    def alter_view_schema(self, name: Any, schema: Any, **options: Any) -> None:
        self.alter_view(name, set_schema=schema, **options)

    def alter_view_owner(self, name: Any, role: Any, **options: Any) -> None:
        self.alter_view(name, owner_to=role, **options)

    def alter_view_set_options(self, name: Any, set_options: Any, **options: Any) -> None:
        self.alter_view(name, set_options=set_options, **options)

    def alter_view_reset_options(self, name: Any, *reset_options: Any, **options: Any) -> None:
        self.alter_view(name, reset_options=list(reset_options), **options)

    def alter_view_set_column_default(self, name: Any, column: str, expression: Any, **options: Any) -> None:
        self.alter_view(name, set_default=(column, expression), **options)

    def alter_view_drop_column_default(self, name: Any, column: str, **options: Any) -> None:
        self.alter_view(name, drop_default=column, **options)

    # ========================================================================
    # MATERIALIZED VIEWS
    # ========================================================================

    def create_materialized_view(self, name: Any, query: str, **options: Any) -> None:
        self._run(
            "create_materialized_view",
            MaterializedViewDefinition(name, query, self.features, **options).to_sql(),
            "materialized_view",
            name,
        )

    def drop_materialized_view(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self.features.check("materialized_views")
        self._run(
            "drop_materialized_view",
            MaterializedViewBuilder.drop(*names, if_exists=if_exists, cascade=cascade),
            "materialized_view",
            ", ".join(str(n) for n in names),
        )

    def refresh_materialized_view(self, name: Any, with_data: bool = True) -> None:
        self.features.check("materialized_views")
        self._run(
            "refresh_materialized_view",
            MaterializedViewBuilder.refresh(name, with_data=with_data),
            "materialized_view",
            name,
        )

    def alter_materialized_view(self, name: Any, if_exists: Optional[bool] = None, **actions: Any) -> None:
        alterer = MaterializedViewAlterer(name, self.features, if_exists=if_exists, **actions)
        self._run("alter_materialized_view", alterer.to_sql(), "materialized_view", name)

    def rename_materialized_view(self, name: Any, new_name: Any, **options: Any) -> None:
        self.alter_materialized_view(name, rename_to=new_name, **options)

    def alter_materialized_view_schema(self, name: Any, schema: Any, **options: Any) -> None:
        self.alter_materialized_view(name, set_schema=schema, **options)

    def alter_materialized_view_owner(self, name: Any, role: Any, **options: Any) -> None:
        self.alter_materialized_view(name, owner_to=role, **options)

    def alter_materialized_view_tablespace(self, name: Any, tablespace: Any, **options: Any) -> None:
        self.alter_materialized_view(name, set_tablespace=tablespace, **options)

    def alter_materialized_view_set_options(self, name: Any, set_options: Any, **options: Any) -> None:
        self.alter_materialized_view(name, set_options=set_options, **options)

    def alter_materialized_view_reset_options(self, name: Any, *reset_options: Any, **options: Any) -> None:
        self.alter_materialized_view(name, reset_options=list(reset_options), **options)

    def alter_materialized_view_set_column_default(
        self, name: Any, column: str, value: Any, **options: Any
    ) -> None:
        self.alter_materialized_view(name, set_default=(column, value), **options)

    def alter_materialized_view_drop_column_default(self, name: Any, column: str, **options: Any) -> None:
        self.alter_materialized_view(name, drop_default=column, **options)

    def cluster_materialized_view(self, name: Any, index: Any, **options: Any) -> None:
        self.alter_materialized_view(name, cluster_on=index, **options)

    def remove_cluster_from_materialized_view(self, name: Any, **options: Any) -> None:
        self.alter_materialized_view(name, remove_cluster=True, **options)

    # ========================================================================
    # ROLES
    # ========================================================================

    def create_role(self, name: Any, **options: Any) -> None:
        self._run("create_role", RoleDefinition("create", name, **options).to_sql(), "role", name)

    def create_user(self, name: Any, **options: Any) -> None:
        """CREATE ROLE with LOGIN unless login=False is passed."""
        options.setdefault("login", True)
        self.create_role(name, **options)

    def alter_role(self, name: Any, **options: Any) -> None:
        self._run("alter_role", RoleDefinition("alter", name, **options).to_sql(), "role", name)

    alter_user = alter_role

    def drop_role(self, *names: Any, if_exists: bool = False) -> None:
        self._run(
            "drop_role",
            RoleBuilder.drop(*names, if_exists=if_exists),
            "role",
            ", ".join(str(n) for n in names),
        )

    drop_user = drop_role

    def _require_session(self, operation: str) -> None:
        if self.connection is None and not self.dry_run:
            raise SessionConnectionRequired(
                operation,
                message=f"{operation} only lasts for its session; pass connection= to keep one open",
            )

    def set_role(self, role: Any, duration: Optional[str] = None) -> None:
        self._require_session("set_role")
        self._run("set_role", RoleBuilder.set_role(role, duration), "role", role)

    def reset_role(self) -> None:
        self._require_session("reset_role")
        self._run("reset_role", RoleBuilder.reset_role(), "role")

    def current_role(self) -> Optional[str]:
        values = first_column(self.query(RoleBuilder.current_role()))
        return values[0] if values else None

    current_user = current_role

    # ========================================================================
    # PERMISSIONS
    # ========================================================================
    # grant_<type>_privileges / revoke_<type>_privileges are attached below
    # for every object type in PRIVILEGE_TYPES.

    def grant_privileges(
        self,
        object_type: str,
        objects: Any,
        privileges: Any,
        roles: Any,
        **options: Any,
    ) -> None:
        grant = GrantPrivilege(object_type, objects, privileges, roles, self.features, **options)
        self._run(f"grant_{object_type}_privileges", grant.to_sql(), object_type, objects)

    def revoke_privileges(
        self,
        object_type: str,
        objects: Any,
        privileges: Any,
        roles: Any,
        **options: Any,
    ) -> None:
        revoke = RevokePrivilege(object_type, objects, privileges, roles, self.features, **options)
        self._run(f"revoke_{object_type}_privileges", revoke.to_sql(), object_type, objects)

    def grant_role_membership(self, roles: Any, role_names: Any, with_admin_option: bool = False) -> None:
        self._run(
            "grant_role_membership",
            RoleMembershipBuilder.grant(roles, role_names, with_admin_option=with_admin_option),
            "role",
            roles,
        )

    def revoke_role_membership(
        self,
        roles: Any,
        role_names: Any,
        with_admin_option: bool = False,
        cascade: bool = False,
    ) -> None:
        self._run(
            "revoke_role_membership",
            RoleMembershipBuilder.revoke(
                roles, role_names, with_admin_option=with_admin_option, cascade=cascade
            ),
            "role",
            roles,
        )

    # ========================================================================
    # SCHEMAS
    # ========================================================================

    def create_schema(self, name: Any, authorization: Optional[Any] = None, if_not_exists: bool = False) -> None:
        self._run(
            "create_schema",
            SchemaBuilder.create(name, authorization, if_not_exists, self.features),
            "schema",
            name,
        )

    def create_schema_authorization(self, role: Any) -> None:
        self._run("create_schema_authorization", SchemaBuilder.create_authorization(role), "schema", role)

    def drop_schema(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_schema",
            SchemaBuilder.drop(*names, if_exists=if_exists, cascade=cascade),
            "schema",
            ", ".join(str(n) for n in names),
        )

    def alter_schema_name(self, name: Any, new_name: Any) -> None:
        self._run("alter_schema_name", SchemaBuilder.rename(name, new_name), "schema", name)

    def alter_schema_owner(self, name: Any, role: Any) -> None:
        self._run("alter_schema_owner", SchemaBuilder.owner_to(name, role), "schema", name)

    # ========================================================================
    # SEQUENCES
    # ========================================================================

    def create_sequence(self, name: Any, **options: Any) -> None:
        self._run("create_sequence", SequenceDefinition("create", name, **options).to_sql(), "sequence", name)

    def alter_sequence(self, name: Any, **options: Any) -> None:
        self._run("alter_sequence", SequenceDefinition("alter", name, **options).to_sql(), "sequence", name)

    def drop_sequence(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_sequence",
            SequenceBuilder.drop(*names, if_exists=if_exists, cascade=cascade),
            "sequence",
            ", ".join(str(n) for n in names),
        )

    def rename_sequence(self, name: Any, new_name: Any) -> None:
        self._run("rename_sequence", SequenceBuilder.rename(name, new_name), "sequence", name)

    def alter_sequence_schema(self, name: Any, schema: Any) -> None:
        self._run("alter_sequence_schema", SequenceBuilder.set_schema(name, schema), "sequence", name)

    def set_sequence_value(self, name: Any, value: int, is_called: bool = True) -> None:
        self._run(
            "set_sequence_value",
            SequenceBuilder.set_value(name, value, is_called=is_called),
            "sequence",
            name,
        )

    # ========================================================================
    # TABLESPACES
    # ========================================================================

    def create_tablespace(self, name: Any, location: str, owner: Optional[Any] = None) -> None:
        self._run("create_tablespace", TablespaceBuilder.create(name, location, owner), "tablespace", name)

    def drop_tablespace(self, name: Any, if_exists: bool = False) -> None:
        self._run("drop_tablespace", TablespaceBuilder.drop(name, if_exists=if_exists), "tablespace", name)

    def rename_tablespace(self, name: Any, new_name: Any) -> None:
        self._run("rename_tablespace", TablespaceBuilder.rename(name, new_name), "tablespace", name)

    def alter_tablespace_owner(self, name: Any, role: Any) -> None:
        self._run("alter_tablespace_owner", TablespaceBuilder.owner_to(name, role), "tablespace", name)

    def alter_tablespace_parameters(self, name: Any, **parameters: Any) -> None:
        self._run(
            "alter_tablespace_parameters",
            TablespaceBuilder.set_parameters(name, **parameters),
            "tablespace",
            name,
        )

    def reset_tablespace_parameters(self, name: Any, *parameters: Any) -> None:
        self._run(
            "reset_tablespace_parameters",
            TablespaceBuilder.reset_parameters(name, *parameters),
            "tablespace",
            name,
        )

    # ========================================================================
    # EXTENSIONS
    # ========================================================================

    def create_extension(
        self,
        name: Any,
        if_not_exists: bool = False,
        schema: Optional[Any] = None,
        version: Optional[Any] = None,
        old_version: Optional[Any] = None,
    ) -> None:
        self._run(
            "create_extension",
            ExtensionBuilder.create(
                name,
                if_not_exists=if_not_exists,
                schema=schema,
                version=version,
                old_version=old_version,
                features=self.features,
            ),
            "extension",
            name,
        )

    def drop_extension(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_extension",
            ExtensionBuilder.drop(*names, if_exists=if_exists, cascade=cascade, features=self.features),
            "extension",
            ", ".join(str(n) for n in names),
        )

    def update_extension(self, name: Any, new_version: Optional[Any] = None) -> None:
        self._run(
            "update_extension",
            ExtensionBuilder.update(name, new_version, features=self.features),
            "extension",
            name,
        )

    def alter_extension_schema(self, name: Any, schema: Any) -> None:
        self._run(
            "alter_extension_schema",
            ExtensionBuilder.set_schema(name, schema, features=self.features),
            "extension",
            name,
        )

    def alter_extension(
        self,
        name: Any,
        definition: Optional[Callable[[ExtensionAlterer], Any]] = None,
        **actions: Any,
    ) -> None:
        """
        ALTER EXTENSION ADD/DROP member objects.

        Example:
            pg.alter_extension("foo", lambda e: e.add_table("bar").drop_cast("text", "integer"))
        """
        alterer = ExtensionAlterer(name, self.features, **actions)
        if definition is not None:
            definition(alterer)
        if alterer.empty():
            return
        self._run("alter_extension", alterer.to_sql(), "extension", name)

    # ========================================================================
    # EVENT TRIGGERS
    # ========================================================================

    def create_event_trigger(self, name: Any, event: str, function: Any, **options: Any) -> None:
        self._run(
            "create_event_trigger",
            EventTriggerDefinition(name, event, function, self.features, **options).to_sql(),
            "event_trigger",
            name,
        )

    def drop_event_trigger(self, name: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self.features.check("event_triggers")
        self._run(
            "drop_event_trigger",
            EventTriggerBuilder.drop(name, if_exists=if_exists, cascade=cascade),
            "event_trigger",
            name,
        )

    def rename_event_trigger(self, name: Any, new_name: Any) -> None:
        self.features.check("event_triggers")
        self._run("rename_event_trigger", EventTriggerBuilder.rename(name, new_name), "event_trigger", name)

    def alter_event_trigger_owner(self, name: Any, role: Any) -> None:
        self.features.check("event_triggers")
        self._run("alter_event_trigger_owner", EventTriggerBuilder.owner_to(name, role), "event_trigger", name)

    def enable_event_trigger(self, name: Any, always: bool = False, replica: bool = False) -> None:
        self.features.check("event_triggers")
        self._run(
            "enable_event_trigger",
            EventTriggerBuilder.enable(name, always=always, replica=replica),
            "event_trigger",
            name,
        )

    def disable_event_trigger(self, name: Any) -> None:
        self.features.check("event_triggers")
        self._run("disable_event_trigger", EventTriggerBuilder.disable(name), "event_trigger", name)

    # ========================================================================
    # LANGUAGES
    # ========================================================================

    def create_language(
        self,
        name: Any,
        trusted: bool = False,
        call_handler: Optional[Any] = None,
        validator: Optional[str] = None,
    ) -> None:
        self._run(
            "create_language",
            LanguageBuilder.create(name, trusted=trusted, call_handler=call_handler, validator=validator),
            "language",
            name,
        )

    def drop_language(self, name: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_language",
            LanguageBuilder.drop(name, if_exists=if_exists, cascade=cascade),
            "language",
            name,
        )

    def alter_language_name(self, name: Any, new_name: Any) -> None:
        self._run("alter_language_name", LanguageBuilder.rename(name, new_name), "language", name)

    def alter_language_owner(self, name: Any, role: Any) -> None:
        self._run("alter_language_owner", LanguageBuilder.owner_to(name, role), "language", name)

    # ========================================================================
    # RULES AND TRIGGERS
    # ========================================================================

    def create_rule(
        self,
        name: Any,
        event: str,
        table: Any,
        action: str,
        commands: Any,
        **options: Any,
    ) -> None:
        self._run(
            "create_rule",
            RuleDefinition(name, event, table, action, commands, **options).to_sql(),
            "rule",
            name,
        )

    def drop_rule(self, name: Any, table: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run("drop_rule", RuleBuilder.drop(name, table, if_exists=if_exists, cascade=cascade), "rule", name)

    def rename_rule(self, name: Any, table: Any, new_name: Any) -> None:
        self._run("rename_rule", RuleBuilder.rename(name, table, new_name, self.features), "rule", name)

    def create_trigger(
        self,
        name: Any,
        called: str,
        events: Any,
        table: Any,
        function: Any,
        **options: Any,
    ) -> None:
        self._run(
            "create_trigger",
            TriggerDefinition(name, called, events, table, function, **options).to_sql(),
            "trigger",
            name,
        )

    def drop_trigger(self, name: Any, table: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_trigger",
            TriggerBuilder.drop(name, table, if_exists=if_exists, cascade=cascade),
            "trigger",
            name,
        )

    def rename_trigger(self, name: Any, table: Any, new_name: Any) -> None:
        self._run("rename_trigger", TriggerBuilder.rename(name, table, new_name), "trigger", name)

    # ========================================================================
    # TEXT SEARCH
    # ========================================================================
    # drop_/rename_/alter_..._owner/alter_..._schema wrappers for each text
    # search object kind are attached below.

    def create_text_search_configuration(
        self,
        name: Any,
        parser_name: Optional[Any] = None,
        source_config: Optional[Any] = None,
    ) -> None:
        self._run(
            "create_text_search_configuration",
            TextSearchBuilder.create_configuration(name, parser_name, source_config),
            "text_search_configuration",
            name,
        )

    def add_text_search_configuration_mapping(self, name: Any, tokens: Any, dictionaries: Any) -> None:
        self._run(
            "add_text_search_configuration_mapping",
            TextSearchBuilder.add_configuration_mapping(name, tokens, dictionaries),
            "text_search_configuration",
            name,
        )

    def alter_text_search_configuration_mapping(self, name: Any, tokens: Any, dictionaries: Any) -> None:
        self._run(
            "alter_text_search_configuration_mapping",
            TextSearchBuilder.alter_configuration_mapping(name, tokens, dictionaries),
            "text_search_configuration",
            name,
        )

    def replace_text_search_configuration_dictionary(self, name: Any, old_dictionary: Any, new_dictionary: Any) -> None:
        self._run(
            "replace_text_search_configuration_dictionary",
            TextSearchBuilder.replace_configuration_dictionary(name, old_dictionary, new_dictionary),
            "text_search_configuration",
            name,
        )

    def alter_text_search_configuration_mapping_replace_dictionary(
        self,
        name: Any,
        mappings: Any,
        old_dictionary: Any,
        new_dictionary: Any,
    ) -> None:
        self._run(
            "alter_text_search_configuration_mapping_replace_dictionary",
            TextSearchBuilder.alter_configuration_mapping_replace_dictionary(
                name, mappings, old_dictionary, new_dictionary
            ),
            "text_search_configuration",
            name,
        )

    def drop_text_search_configuration_mapping(self, name: Any, *mappings: Any, if_exists: bool = False) -> None:
        self._run(
            "drop_text_search_configuration_mapping",
            TextSearchBuilder.drop_configuration_mapping(name, *mappings, if_exists=if_exists),
            "text_search_configuration",
            name,
        )

    def create_text_search_dictionary(self, name: Any, template: Any, **options: Any) -> None:
        self._run(
            "create_text_search_dictionary",
            TextSearchBuilder.create_dictionary(name, template, **options),
            "text_search_dictionary",
            name,
        )

    def alter_text_search_dictionary(self, name: Any, **options: Any) -> None:
        self._run(
            "alter_text_search_dictionary",
            TextSearchBuilder.alter_dictionary(name, **options),
            "text_search_dictionary",
            name,
        )

    def create_text_search_template(self, name: Any, lexize: Any, init: Optional[Any] = None) -> None:
        self._run(
            "create_text_search_template",
            TextSearchBuilder.create_template(name, lexize, init),
            "text_search_template",
            name,
        )

    def create_text_search_parser(
        self,
        name: Any,
        start: Any,
        gettoken: Any,
        end: Any,
        lextypes: Any,
        headline: Optional[Any] = None,
    ) -> None:
        self._run(
            "create_text_search_parser",
            TextSearchBuilder.create_parser(name, start, gettoken, end, lextypes, headline),
            "text_search_parser",
            name,
        )

    # ========================================================================
    # TYPES
    # ========================================================================

    def create_enum(self, name: Any, *values: Any) -> None:
        self._run("create_enum", TypeBuilder.create_enum(name, *values), "type", name)

    def add_enum_value(
        self,
        enum: Any,
        value: Any,
        before: Optional[Any] = None,
        after: Optional[Any] = None,
        if_not_exists: bool = False,
    ) -> None:
        self._run(
            "add_enum_value",
            TypeBuilder.add_enum_value(
                enum, value, before=before, after=after, if_not_exists=if_not_exists, features=self.features
            ),
            "type",
            enum,
        )

    def drop_type(self, *names: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(
            "drop_type",
            TypeBuilder.drop(*names, if_exists=if_exists, cascade=cascade),
            "type",
            ", ".join(str(n) for n in names),
        )

    def rename_type(self, name: Any, new_name: Any) -> None:
        self._run("rename_type", TypeBuilder.rename(name, new_name), "type", name)

    def alter_type_schema(self, name: Any, schema: Any) -> None:
        self._run("alter_type_schema", TypeBuilder.set_schema(name, schema), "type", name)

    def alter_type_owner(self, name: Any, role: Any) -> None:
        self._run("alter_type_owner", TypeBuilder.owner_to(name, role), "type", name)

    # ========================================================================
    # MAINTENANCE, BULK LOAD AND POSTGIS
    # ========================================================================

    def vacuum(self, table: Any = None, **options: Any) -> None:
        self._run("vacuum", VacuumDefinition(table, self.features, **options).to_sql(), "table", table)

    def copy_from(self, table: Any, path: str, **options: Any) -> None:
        """
        COPY a file into a table.

        Local files (the default) are streamed over FROM STDIN in
        copy_block_size chunks; server-side files and programs are read
        by the server itself.
        """
        definition = CopyFromDefinition(table, path, self.features, **options)
        statement = definition.to_sql()
        if not definition.streams_local_file:
            self._run("copy_from", statement, "table", table)
            return

        with log_context(operation="copy_from", object_type="table", object_name=str(table)):
            text = self._record(statement)
            if self.dry_run:
                return

            block_size = get_defaults().ddl.copy_block_size
            with self._error_context("copy_from", text):
                with open(path, "rb") as f, self._cursor() as cur:
                    with cur.copy(statement) as copy:
                        for block in iter(lambda: f.read(block_size), b""):
                            copy.write(block)
            self.logger.debug(f"Copied {path} into {table}")

    def add_geometry_column(self, table: Any, column: str, **options: Any) -> None:
        self._run(
            "add_geometry_column",
            GeometryBuilder.add_geometry_column(table, column, self.features, **options),
            "table",
            table,
        )

    def update_geometry_srid(self, table: Any, column: str, srid: int) -> None:
        self.features.check("postgis")
        self._run(
            "update_geometry_srid",
            GeometryBuilder.update_geometry_srid(table, column, srid),
            "table",
            table,
        )

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    def _names(self, statement: sql.Composable) -> List[Any]:
        return first_column(self.query(statement))

    def _count(self, statement: sql.Composable) -> int:
        rows = self.query(statement)
        return int(row_values(rows[0])[0]) if rows else 0

    def views(self) -> List[str]:
        return self._names(CatalogQueries.views())

    def view_exists(self, view: str, schema: Optional[str] = None) -> bool:
        return self._count(CatalogQueries.view_exists(view, schema)) > 0

    def materialized_views(self) -> List[str]:
        return self._names(CatalogQueries.materialized_views())

    def roles(self) -> List[str]:
        return self._names(CatalogQueries.roles())

    def role_exists(self, name: str) -> bool:
        return name in self.roles()

    def languages(self) -> List[str]:
        return self._names(CatalogQueries.languages())

    def language_exists(self, name: str) -> bool:
        return name in self.languages()

    def sequences(self) -> List[str]:
        return self._names(CatalogQueries.sequences())

    def sequence_exists(self, name: str) -> bool:
        return name in self.sequences()

    def types(self) -> List[str]:
        return self._names(CatalogQueries.types())

    def type_exists(self, name: str) -> bool:
        return name in self.types()

    def enum_values(self, name: Any) -> List[str]:
        return self._names(CatalogQueries.enum_values(name))

    def foreign_keys(self, table: str) -> List[ForeignKeyReference]:
        return foreign_key_rows(self.query(CatalogQueries.foreign_keys(table)))

    def referenced_foreign_keys(self, table: str) -> List[ForeignKeyReference]:
        return foreign_key_rows(self.query(CatalogQueries.referenced_foreign_keys(table)))

    def server_version(self) -> Optional[str]:
        values = self._names(CatalogQueries.server_version())
        return values[0] if values else None

    def postgis_version(self) -> Optional[PostGISVersion]:
        """Parsed postgis_full_version(), or None when PostGIS is not installed."""
        if self._count(CatalogQueries.function_exists("postgis_full_version")) == 0:
            return None
        return postgis_version_row(self.query(CatalogQueries.postgis_full_version()))

    def detect_features(self) -> Features:
        """
        Replace the configured features with the live server's versions.

        In dry-run mode nothing is queried and the current features stay.
        """
        if self.dry_run:
            return self.features

        server_version = self.server_version() or self.features.server_version
        postgis = self.postgis_version()
        self.features = Features(server_version, postgis.lib if postgis else None)
        self.logger.info(
            f"Detected PostgreSQL {self.features.server_version}, "
            f"PostGIS {self.features.postgis_version or 'not installed'}"
        )
        return self.features


# ============================================================================
# GENERATED WRAPPERS
# ============================================================================

def _privilege_methods(object_type: str):
    def grant(self: PostgreSQLExtensions, objects: Any, privileges: Any, roles: Any, **options: Any) -> None:
        self.grant_privileges(object_type, objects, privileges, roles, **options)

    def revoke(self: PostgreSQLExtensions, objects: Any, privileges: Any, roles: Any, **options: Any) -> None:
        self.revoke_privileges(object_type, objects, privileges, roles, **options)

    grant.__name__ = f"grant_{object_type}_privileges"
    revoke.__name__ = f"revoke_{object_type}_privileges"
    return grant, revoke


for _object_type in PRIVILEGE_TYPES:
    _grant, _revoke = _privilege_methods(_object_type)
    setattr(PostgreSQLExtensions, _grant.__name__, _grant)
    setattr(PostgreSQLExtensions, _revoke.__name__, _revoke)


# (suffix, keyword, supports OWNER TO)
TEXT_SEARCH_KINDS = (
    ("text_search_configuration", CONFIGURATION, True),
    ("text_search_dictionary", DICTIONARY, True),
    ("text_search_template", TEMPLATE, False),
    ("text_search_parser", PARSER, False),
)


def _text_search_methods(suffix: str, kind: str, with_owner: bool):
    def drop(self: PostgreSQLExtensions, name: Any, if_exists: bool = False, cascade: bool = False) -> None:
        self._run(f"drop_{suffix}", TextSearchBuilder.drop(kind, name, if_exists, cascade), suffix, name)

    def rename(self: PostgreSQLExtensions, name: Any, new_name: Any) -> None:
        self._run(f"rename_{suffix}", TextSearchBuilder.rename(kind, name, new_name), suffix, name)

    def set_schema(self: PostgreSQLExtensions, name: Any, schema: Any) -> None:
        self._run(f"alter_{suffix}_schema", TextSearchBuilder.set_schema(kind, name, schema), suffix, name)

    def owner_to(self: PostgreSQLExtensions, name: Any, role: Any) -> None:
        self._run(f"alter_{suffix}_owner", TextSearchBuilder.owner_to(kind, name, role), suffix, name)

    methods = {
        f"drop_{suffix}": drop,
        f"rename_{suffix}": rename,
        f"alter_{suffix}_schema": set_schema,
    }
    if with_owner:
        methods[f"alter_{suffix}_owner"] = owner_to
    return methods


for _suffix, _kind, _with_owner in TEXT_SEARCH_KINDS:
    for _name, _method in _text_search_methods(_suffix, _kind, _with_owner).items():
        _method.__name__ = _name
        setattr(PostgreSQLExtensions, _name, _method)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PostgreSQLExtensions",
    "TEXT_SEARCH_KINDS",
]
