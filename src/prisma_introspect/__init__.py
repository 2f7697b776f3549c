"""prisma-introspect: turn an existing Postgres, MySQL or MongoDB database into a Prisma datamodel."""

__version__ = "0.1.0"
