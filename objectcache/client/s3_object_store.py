"""ObjectStore implementation backed by boto3."""

import functools
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from objectcache.client.object_store import ObjectStore, ObjectStoreError


def _named_client_errors(fn):
    @functools.wraps(fn)
    def wrapped(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ClientError as e:
            error = e.response.get('Error', {})
            raise ObjectStoreError(error.get('Code') or 'ClientError',
                                   str(e)) from e
        except BotoCoreError as e:
            raise ObjectStoreError(type(e).__name__, str(e)) from e

    return wrapped


class S3ObjectStore(ObjectStore):
    """Object store using the S3 API.

       Credentials are resolved by boto3 in the usual way (environment,
       shared config, instance roles). The region may be passed explicitly
       or taken from ``AWS_REGION`` / ``AWS_DEFAULT_REGION``.

       An already configured boto3 client may be passed as ``client``.
    """

    def __init__(self, client=None, region=None, endpoint_url=None):
        if client is None:
            region = (region or os.environ.get('AWS_REGION')
                      or os.environ.get('AWS_DEFAULT_REGION') or None)
            client = boto3.client('s3', region_name=region,
                                  endpoint_url=endpoint_url)
        self._client = client

    @staticmethod
    def _object_info(response):
        return ObjectStore.ObjectInfo(response.get('ContentLength'),
                                      response.get('ContentType'))

    @_named_client_errors
    def head_object(self, location):
        response = self._client.head_object(Bucket=location.bucket,
                                            Key=location.key)
        return self._object_info(response)

    @_named_client_errors
    def get_object(self, location):
        response = self._client.get_object(Bucket=location.bucket,
                                           Key=location.key)
        return response['Body'], self._object_info(response)

    @_named_client_errors
    def put_object(self, location, stream, content_type=None,
                   storage_class=None):
        extra_args = {}
        if content_type:
            extra_args['ContentType'] = content_type
        if storage_class:
            extra_args['StorageClass'] = storage_class
        self._client.upload_fileobj(stream, location.bucket, location.key,
                                    ExtraArgs=extra_args or None)

    @_named_client_errors
    def delete_object(self, location):
        self._client.delete_object(Bucket=location.bucket, Key=location.key)
