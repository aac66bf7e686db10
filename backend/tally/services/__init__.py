"""Room and game services.

Domain logic shared by the HTTP routes and the CLI; transport concerns
(request parsing, status codes, socket sessions) stay out of here.
"""
