"""Application package for the Postboard REST backend.

This package exposes user registration/login and CRUD on posts. The
modules are small: `config` (settings), `database` and `models`
(persistence), `security` (password hashing and tokens), `validation` and
`auth` (request gates), `services`, and the `routes` package. The app is
assembled by `postboard.main.create_app`.
"""
