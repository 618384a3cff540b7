"""
D1 (SQLite) schema for the starter app.

BOOTSTRAP_STATEMENTS is the DDL applied at startup and by the seed script.
The Table objects mirror it so queries can be built with SQLAlchemy Core.
"""

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    text,
)

BOOTSTRAP_STATEMENTS = (
    """CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    name TEXT(100),
    email TEXT(255) NOT NULL,
    password_hash TEXT NOT NULL,
    role TEXT(20) DEFAULT 'member' NOT NULL,
    created_at INTEGER DEFAULT (unixepoch()) NOT NULL,
    updated_at INTEGER DEFAULT (unixepoch()) NOT NULL,
    deleted_at INTEGER
  );""",
    """CREATE TABLE IF NOT EXISTS teams (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    name TEXT(100) NOT NULL,
    created_at INTEGER DEFAULT (unixepoch()) NOT NULL,
    updated_at INTEGER DEFAULT (unixepoch()) NOT NULL,
    stripe_customer_id TEXT,
    stripe_subscription_id TEXT,
    stripe_product_id TEXT,
    plan_name TEXT(50),
    subscription_status TEXT(20)
  );""",
    "CREATE UNIQUE INDEX IF NOT EXISTS teams_stripe_customer_id_unique ON teams (stripe_customer_id);",
    "CREATE UNIQUE INDEX IF NOT EXISTS teams_stripe_subscription_id_unique ON teams (stripe_subscription_id);",
    """CREATE TABLE IF NOT EXISTS team_members (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    user_id INTEGER NOT NULL,
    team_id INTEGER NOT NULL,
    role TEXT(50) NOT NULL,
    joined_at INTEGER DEFAULT (unixepoch()) NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON UPDATE NO ACTION ON DELETE NO ACTION,
    FOREIGN KEY (team_id) REFERENCES teams(id) ON UPDATE NO ACTION ON DELETE NO ACTION
  );""",
    """CREATE TABLE IF NOT EXISTS invitations (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    team_id INTEGER NOT NULL,
    email TEXT(255) NOT NULL,
    role TEXT(50) NOT NULL,
    invited_by INTEGER NOT NULL,
    invited_at INTEGER DEFAULT (unixepoch()) NOT NULL,
    status TEXT(20) DEFAULT 'pending' NOT NULL,
    FOREIGN KEY (team_id) REFERENCES teams(id) ON UPDATE NO ACTION ON DELETE NO ACTION,
    FOREIGN KEY (invited_by) REFERENCES users(id) ON UPDATE NO ACTION ON DELETE NO ACTION
  );""",
    """CREATE TABLE IF NOT EXISTS activity_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    team_id INTEGER NOT NULL,
    user_id INTEGER,
    action TEXT NOT NULL,
    timestamp INTEGER DEFAULT (unixepoch()) NOT NULL,
    ip_address TEXT(45),
    FOREIGN KEY (team_id) REFERENCES teams(id) ON UPDATE NO ACTION ON DELETE NO ACTION,
    FOREIGN KEY (user_id) REFERENCES users(id) ON UPDATE NO ACTION ON DELETE NO ACTION
  );""",
    "CREATE UNIQUE INDEX IF NOT EXISTS users_email_unique ON users (email);",
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100)),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(20), nullable=False, server_default="member"),
    Column("created_at", Integer, nullable=False, server_default=text("(unixepoch())")),
    Column("updated_at", Integer, nullable=False, server_default=text("(unixepoch())")),
    Column("deleted_at", Integer),
)

teams = Table(
    "teams",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("created_at", Integer, nullable=False, server_default=text("(unixepoch())")),
    Column("updated_at", Integer, nullable=False, server_default=text("(unixepoch())")),
    Column("stripe_customer_id", Text, unique=True),
    Column("stripe_subscription_id", Text, unique=True),
    Column("stripe_product_id", Text),
    Column("plan_name", String(50)),
    Column("subscription_status", String(20)),
)

team_members = Table(
    "team_members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("team_id", Integer, ForeignKey("teams.id"), nullable=False),
    Column("role", String(50), nullable=False),
    Column("joined_at", Integer, nullable=False, server_default=text("(unixepoch())")),
)

invitations = Table(
    "invitations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("team_id", Integer, ForeignKey("teams.id"), nullable=False),
    Column("email", String(255), nullable=False),
    Column("role", String(50), nullable=False),
    Column("invited_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("invited_at", Integer, nullable=False, server_default=text("(unixepoch())")),
    Column("status", String(20), nullable=False, server_default="pending"),
)

activity_logs = Table(
    "activity_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("team_id", Integer, ForeignKey("teams.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id")),
    Column("action", Text, nullable=False),
    Column("timestamp", Integer, nullable=False, server_default=text("(unixepoch())")),
    Column("ip_address", String(45)),
)
