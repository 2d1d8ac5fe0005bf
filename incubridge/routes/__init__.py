# routes -- FastAPI routers, all mounted under /api
#
#   user      -- startup accounts: apply, login, dashboard, events, schedules
#   admin     -- admin / incubator accounts and the admin dashboard
#   startup   -- startup profile sections and uploads
#   matching  -- matching requests between startups and incubators
#   legal     -- legal FAQ chatbot
