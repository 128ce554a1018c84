"""
Lambda handler packages deployed as code assets
"""
