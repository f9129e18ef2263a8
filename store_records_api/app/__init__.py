"""
Application package initializer.

This package contains the FastAPI entrypoint and the orchestration
layer that sits between the store form and the external tabular
store.  It is organised into a few logical pieces:

* ``core`` – configuration, logging, error taxonomy and the access guard.
* ``clients`` – the record service client speaking the table Action API.
* ``schemas`` – typed records and the aggregate document.
* ``services`` – store resolution, aggregate read and transactional write.
* ``api`` – versioned HTTP routers over the services.

Unlike a module-level app instance, the application is built through
``main.create_app`` so that configuration is validated explicitly at
process start.
"""
