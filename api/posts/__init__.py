"""
Music posts: create (with object storage uploads), feed, search, fetch.
"""
