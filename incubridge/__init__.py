# incubridge -- FastAPI server connecting startups with incubators
#
# Modules:
#   app        -- FastAPI application with lifespan management
#   config     -- settings from environment / .env
#   database   -- PostgreSQL / SQLite async engine
#   models     -- SQLAlchemy ORM models (startups, admins, matching, events, etc.)
#   schemas    -- Pydantic request/response schemas
#   errors     -- error taxonomy shared by services and routes
#   security   -- password hashing, JWT tokens, caller resolution
#   seed_csv   -- CSV -> incubator accounts
#   routes/    -- API endpoints (user, admin, startup, matching, legal)
#   services/  -- matching workflow, profile rules, legal chatbot, chat state

__version__ = "1.0.0"
