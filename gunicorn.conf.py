# Run with: gunicorn -c gunicorn.conf.py app:app

# The app is stateless per request; scale with workers, not threads.
workers = 2

# Bind
bind = "0.0.0.0:8080"

# Logging (app logs are JSON on stdout, see utils/logger.py)
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Dashboard CSV export reads whole tables
timeout = 60
