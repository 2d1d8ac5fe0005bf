# services -- business logic behind the routes
#
# Modules:
#   matching       -- fan-out, responses, score and selection of matching requests
#   profile        -- profile section updates, completeness, uploaded files
#   legal_chatbot  -- keyword-scored canned legal answers
#   chat_store     -- TTL chat history + sliding-window rate limiter (ChatService)
#   maintenance    -- APScheduler job purging expired chat state
