# Gunicorn configuration file

# Sessions and the lookup cache live in process memory,
# so keep a single worker and serve concurrent requests with threads
workers = 1
threads = 4

# Timeout for workers (in seconds)
# Covers the wait for a slow Wordnik lookup
timeout = 60

# Binding
bind = "0.0.0.0:8080"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"

wsgi_app = "wordplay_app:app"
