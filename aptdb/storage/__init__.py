"""
Storage backends for the aptdb library.
"""

from .bucket_store import BucketStore, Transaction, Bucket

__all__ = ['BucketStore', 'Transaction', 'Bucket']
