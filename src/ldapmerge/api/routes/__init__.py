"""HTTP route modules, registered explicitly by :func:`ldapmerge.api.main.create_app`."""
