# ============================================================================
# POSTGIS GEOMETRY COLUMNS
# ============================================================================
# STATUS: Core - Spatial column definitions and their side statements
# PURPOSE: geometry/geography columns, enforce_* constraints, GiST indexes
# ============================================================================
"""
PostGIS Geometry Columns.

A GeometryColumnDefinition renders the column clause itself and carries
the statements that go with it:

    table_constraints        enforce_srid_/enforce_dims_/enforce_geotype_
                             CHECKs (PostGIS < 2.0, or force_constraints)
    geometry_columns_entry   DELETE/INSERT into geometry_columns
                             (PostGIS < 2.0 geometry columns only)
    geometry_column_index    CREATE INDEX ... USING "gist"

On PostGIS >= 2.0 the column type carries the typmod, e.g.
geometry(POLYGON, 4326); older versions use the bare type and rely on the
CHECK constraints.

Usage:
    from core.ddl.geometry import GeometryColumnDefinition
    from core.features import Features

    col = GeometryColumnDefinition("the_geom", Features("9.3", "2.1"), srid=4326)
    col.to_sql().as_string(None)   # "the_geom" geometry(GEOMETRY, 4326)
"""

from typing import Any, List, Optional, Tuple

from psycopg import sql

from core.ddl.columns import ColumnDefinition
from core.ddl.constraints import CheckConstraint, ConstraintBuilder
from core.ddl.ddl_utils import number, terminate
from core.ddl.indexes import IndexDefinition
from core.errors import (
    InvalidGeometryDimensions,
    InvalidGeometryType,
    InvalidSpatialColumnType,
)
from core.features import Features, resolve_features
from core.quoting import Name, current_scoped_schema, quote_column_name, quote_table_name, split_name


GEOMETRY_TYPES = (
    "GEOMETRY",
    "GEOMETRYCOLLECTION",
    "POINT",
    "MULTIPOINT",
    "POLYGON",
    "MULTIPOLYGON",
    "LINESTRING",
    "MULTILINESTRING",
    "GEOMETRYM",
    "GEOMETRYCOLLECTIONM",
    "POINTM",
    "MULTIPOINTM",
    "POLYGONM",
    "MULTIPOLYGONM",
    "LINESTRINGM",
    "MULTILINESTRINGM",
    "CIRCULARSTRING",
    "CIRCULARSTRINGM",
    "COMPOUNDCURVE",
    "COMPOUNDCURVEM",
    "CURVEPOLYGON",
    "CURVEPOLYGONM",
    "MULTICURVE",
    "MULTICURVEM",
    "MULTISURFACE",
    "MULTISURFACEM",
)

SPATIAL_COLUMN_TYPES = ("geometry", "geography")


def extract_schema_and_table(table: Name) -> Tuple[str, str]:
    """
    Resolve the schema a spatial table lives in.

    Explicit schema first, then the scoped schema, then a dotted name,
    defaulting to public.
    """
    schema, name = split_name(table)
    if schema is not None:
        return schema, name
    if current_scoped_schema():
        return current_scoped_schema(), name
    if "." in name:
        schema, name = name.split(".", 1)
        return schema, name
    return "public", name


class GeometryColumnDefinition(ColumnDefinition):
    """
    A PostGIS spatial column.

    Options:
        spatial_column_type: geometry (default) or geography
        geometry_type: One of GEOMETRY_TYPES (default GEOMETRY)
        srid: Defaults to the unknown SRID for the column type
        ndims: Defaults to 3 for ...M types, else 2
        add_constraints: Add enforce_* CHECKs where needed (default True)
        force_constraints: Add them even on PostGIS >= 2.0
        add_geometry_columns_entry: Maintain geometry_columns (default True)
        create_gist_index: True, False, or an explicit index name
        null, default: Column options
    """

    def __init__(self, name: str, features: Optional[Features] = None, **options: Any):
        features = resolve_features(features)
        features.check("postgis")
        self.features = features

        spatial_column_type = str(options.get("spatial_column_type", "geometry")).lower()
        geometry_type = options.get("geometry_type", "geometry")
        if spatial_column_type not in SPATIAL_COLUMN_TYPES:
            raise InvalidSpatialColumnType(options.get("spatial_column_type"))
        if str(geometry_type).upper() not in GEOMETRY_TYPES:
            raise InvalidGeometryType(geometry_type)

        self.spatial_column_type = spatial_column_type
        self.geometry_type = str(geometry_type).upper()

        srid = options.get("srid")
        if srid is None:
            srid = features.unknown_srids()[spatial_column_type]
        self.srid = int(srid)

        ndims = options.get("ndims")
        if ndims is None:
            ndims = 3 if self.geometry_type.endswith("M") else 2
        self._assert_valid_ndims(int(ndims), self.geometry_type)
        self.ndims = int(ndims)

        self.add_constraints = options.get("add_constraints", True)
        self.force_constraints = options.get("force_constraints", False)
        self.add_geometry_columns_entry = options.get("add_geometry_columns_entry", True)
        self.create_gist_index = options.get("create_gist_index", True)

        super().__init__(
            name,
            self._column_type(),
            default=options.get("default"),
            null=options.get("null"),
        )
        self.table_constraints = self._build_constraints()

    @property
    def legacy_postgis(self) -> bool:
        return not self.features.postgis_at_least("2.0")

    @staticmethod
    def _assert_valid_ndims(ndims: int, geometry_type: str) -> None:
        if geometry_type.endswith("M") and ndims != 3:
            raise InvalidGeometryDimensions(
                ndims,
                message=f"Invalid PostGIS geometry dimensions ({geometry_type} requires 3 dimensions)",
            )
        if ndims < 0 or ndims > 4:
            raise InvalidGeometryDimensions(
                ndims,
                message=f"Invalid PostGIS geometry dimensions (should be between 0 and 4 inclusive) - {ndims}",
            )

    def _column_type(self) -> str:
        if self.legacy_postgis:
            return self.spatial_column_type
        args = [self.geometry_type]
        if self.srid not in (0, -1):
            args.append(str(self.srid))
        return f"{self.spatial_column_type}({', '.join(args)})"

    def _build_constraints(self) -> List[CheckConstraint]:
        if not self.add_constraints:
            return []
        if not (self.legacy_postgis or self.force_constraints):
            return []

        column = quote_column_name(self.name).as_string(None)
        constraints = [
            CheckConstraint(
                f"ST_srid({column}) = ({self.srid})",
                name=f"enforce_srid_{self.name}",
            ),
            CheckConstraint(
                f"ST_ndims({column}) = {self.ndims}",
                name=f"enforce_dims_{self.name}",
            ),
        ]
        if self.geometry_type != "GEOMETRY":
            constraints.append(CheckConstraint(
                f"geometrytype({column}) = '{self.geometry_type}'::text OR {column} IS NULL",
                name=f"enforce_geotype_{self.name}",
            ))
        return constraints

    def geometry_columns_entry(self, table: Name) -> List[sql.Composed]:
        """geometry_columns maintenance for PostGIS < 2.0 geometry columns."""
        if not (
            self.add_geometry_columns_entry
            and self.spatial_column_type != "geography"
            and self.legacy_postgis
        ):
            return []

        schema, table_name = extract_schema_and_table(table)
        return [
            sql.SQL(
                "DELETE FROM \"geometry_columns\" WHERE f_table_catalog = '' AND "
                "f_table_schema = {schema} AND "
                "f_table_name = {table} AND "
                "f_geometry_column = {column};"
            ).format(
                schema=sql.Literal(schema),
                table=sql.Literal(table_name),
                column=sql.Literal(str(self.name)),
            ),
            sql.SQL(
                "INSERT INTO \"geometry_columns\" VALUES ('', {schema}, {table}, {column}, {ndims}, {srid}, {type});"
            ).format(
                schema=sql.Literal(schema),
                table=sql.Literal(table_name),
                column=sql.Literal(str(self.name)),
                ndims=number(self.ndims),
                srid=number(self.srid),
                type=sql.Literal(self.geometry_type),
            ),
        ]

    def geometry_column_index(self, table: Name) -> List[sql.Composed]:
        """GiST index on the column, unless disabled."""
        if not self.create_gist_index:
            return []

        schema, table_name = extract_schema_and_table(table)
        if isinstance(self.create_gist_index, str):
            index_name = self.create_gist_index
        else:
            index_name = f"{table_name}_{self.name}_gist_index"

        return [
            IndexDefinition(index_name, (schema, table_name), self.name, using="gist").to_sql()
        ]

    def post_processing(self, table: Name) -> List[sql.Composed]:
        return self.geometry_columns_entry(table) + self.geometry_column_index(table)


class GeometryBuilder:
    """
    Standalone PostGIS statements.

    All methods are static and return sql.Composed objects (or lists of
    them where one call produces several statements).
    """

    @staticmethod
    def add_geometry_column(
        table: Name,
        column: str,
        features: Optional[Features] = None,
        **options: Any,
    ) -> List[sql.Composed]:
        """ADD COLUMN, then its enforce_* constraints, then post-processing."""
        definition = GeometryColumnDefinition(column, features, **options)
        stmts = [terminate(sql.SQL("ALTER TABLE {} ADD COLUMN {}").format(
            quote_table_name(table), definition.to_sql()
        ))]
        stmts.extend(ConstraintBuilder.add(table, c) for c in definition.table_constraints)
        stmts.extend(definition.post_processing(table))
        return stmts

    @staticmethod
    def update_geometry_srid(table: Name, column: str, srid: int) -> sql.Composed:
        schema, table_name = split_name(table)
        if schema is None and "." in table_name:
            schema, table_name = table_name.split(".", 1)

        args = [sql.Literal(table_name), sql.Literal(str(column)), number(srid)]
        if schema:
            args.insert(0, sql.Literal(schema))

        return sql.SQL("SELECT UpdateGeometrySRID({});").format(sql.SQL(", ").join(args))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "GEOMETRY_TYPES",
    "SPATIAL_COLUMN_TYPES",
    "extract_schema_and_table",
    "GeometryColumnDefinition",
    "GeometryBuilder",
]
