"""
Likes and comments on music posts.
"""
