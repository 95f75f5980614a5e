"""Settings package for the booking pipeline.

`base.py` holds the configuration shared by every environment; `dev.py`,
`prod.py` and `test.py` override it.
"""
