"""
rilay core: condition IR, condition engine, settings and errors.
"""
