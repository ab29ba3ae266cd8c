"""Pytest configuration and fixtures for GCE Provision tests."""

import httplib2
import pytest
from googleapiclient.errors import HttpError

from gce_provision.core.config import create_provisioning_config


def http_error(status: int, message: str = 'error') -> HttpError:
    """HttpError as raised by the discovery client."""
    return HttpError(httplib2.Response({'status': status}), message.encode())


class FakeRequest:
    """Request object whose execute() records the call on the fake client."""

    def __init__(self, compute, method, kwargs, handler):
        self.compute = compute
        self.method = method
        self.kwargs = kwargs
        self.handler = handler

    def execute(self):
        self.compute.calls.append((self.method, self.kwargs))
        error = self.compute.errors.get(self.method)
        if error is not None:
            raise error
        return self.handler(**self.kwargs)


class FakeZones:
    def __init__(self, compute):
        self.compute = compute

    def list(self, project, page=0):
        def handler(project, page):
            response = {'items': self.compute.zone_pages[page]}
            if page + 1 < len(self.compute.zone_pages):
                response['nextPageToken'] = str(page + 1)
            return response
        return FakeRequest(self.compute, 'zones.list', {'project': project, 'page': page}, handler)

    def list_next(self, previous_request, previous_response):
        token = previous_response.get('nextPageToken')
        if token is None:
            return None
        return self.list(previous_request.kwargs['project'], page=int(token))


class FakeDisks:
    def __init__(self, compute):
        self.compute = compute

    def insert(self, project, zone, body):
        def handler(project, zone, body):
            self.compute.disks_created[body['name']] = {
                'name': body['name'],
                'zone': zone,
                'status': 'CREATING',
                'selfLink': f'https://compute/projects/{project}/zones/{zone}/disks/{body["name"]}',
                'body': body,
            }
            return dict(self.compute.operations.get('disks.insert',
                                                    self.compute.insert_operation))
        return FakeRequest(self.compute, 'disks.insert',
                           {'project': project, 'zone': zone, 'body': body}, handler)

    def get(self, project, zone, disk):
        def handler(project, zone, disk):
            if disk not in self.compute.disks_created:
                raise http_error(404, 'disk not found')
            data = dict(self.compute.disks_created[disk])
            data['status'] = self.compute.next_status('disk')
            return data
        return FakeRequest(self.compute, 'disks.get',
                           {'project': project, 'zone': zone, 'disk': disk}, handler)


class FakeInstances:
    def __init__(self, compute):
        self.compute = compute

    def insert(self, project, zone, body):
        def handler(project, zone, body):
            self.compute.instances_created[body['name']] = {
                'name': body['name'],
                'id': '1234567890',
                'zone': f'https://compute/projects/{project}/zones/{zone}',
                'body': body,
            }
            operation = dict(self.compute.operations.get('instances.insert',
                                                         self.compute.insert_operation))
            operation.setdefault('targetId', '1234567890')
            return operation
        return FakeRequest(self.compute, 'instances.insert',
                           {'project': project, 'zone': zone, 'body': body}, handler)

    def get(self, project, zone, instance):
        def handler(project, zone, instance):
            if instance not in self.compute.instances_created:
                raise http_error(404, 'instance not found')
            data = dict(self.compute.instances_created[instance])
            data['status'] = self.compute.next_status('instance')
            data['networkInterfaces'] = self.compute.network_interfaces
            return data
        return FakeRequest(self.compute, 'instances.get',
                           {'project': project, 'zone': zone, 'instance': instance}, handler)

    def delete(self, project, zone, instance):
        def handler(project, zone, instance):
            if instance not in self.compute.instances_created:
                raise http_error(404, 'instance not found')
            del self.compute.instances_created[instance]
            return {'name': 'operation-delete', 'status': 'RUNNING'}
        return FakeRequest(self.compute, 'instances.delete',
                           {'project': project, 'zone': zone, 'instance': instance}, handler)

    def aggregatedList(self, project, filter=None):
        def handler(project, filter):
            items = {}
            for data in self.compute.instances_created.values():
                scope = 'zones/' + data['zone'].split('/')[-1]
                items.setdefault(scope, {'instances': []})['instances'].append(data)
            return {'items': items}
        return FakeRequest(self.compute, 'instances.aggregatedList',
                           {'project': project, 'filter': filter}, handler)

    def aggregatedList_next(self, previous_request, previous_response):
        return None


class FakeZoneOperations:
    def __init__(self, compute):
        self.compute = compute

    def get(self, project, zone, operation):
        def handler(project, zone, operation):
            return {'name': operation, 'status': self.compute.next_status('operation')}
        return FakeRequest(self.compute, 'zoneOperations.get',
                           {'project': project, 'zone': zone, 'operation': operation}, handler)


class FakeCompute:
    """
    In-memory stand-in for the Compute Engine v1 discovery client.

    Every executed request is recorded in ``calls`` as (method, kwargs).
    Set ``errors['disks.insert'] = http_error(403)`` to make a method fail.
    """

    def __init__(self):
        self.calls = []
        self.errors = {}
        self.zone_pages = [[
            {'name': 'us-central1-a', 'status': 'UP'},
            {'name': 'us-central1-b', 'status': 'DOWN'},
            {'name': 'europe-west1-a', 'status': 'UP'},
        ]]
        self.insert_operation = {'name': 'operation-insert', 'status': 'DONE'}
        self.operations = {}  # per-method override of insert_operation
        self.disks_created = {}
        self.instances_created = {}
        self.statuses = {'disk': ['READY'], 'instance': ['RUNNING'], 'operation': ['DONE']}
        self.network_interfaces = [{
            'networkIP': '10.128.0.2',
            'accessConfigs': [{'name': 'External NAT', 'natIP': '1.2.3.4'}],
        }]

    def next_status(self, kind):
        """Pop the next status; the last one repeats forever."""
        queue = self.statuses[kind]
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def methods_called(self):
        return [method for method, _ in self.calls]

    def zones(self):
        return FakeZones(self)

    def disks(self):
        return FakeDisks(self)

    def instances(self):
        return FakeInstances(self)

    def zoneOperations(self):
        return FakeZoneOperations(self)


@pytest.fixture
def fake_compute():
    return FakeCompute()


@pytest.fixture
def config():
    """Complete config with instant polling."""
    return create_provisioning_config(
        google_client_email='e',
        google_project='p',
        image_name='test-image',
        username='tester',
        poll_interval=0.0,
        poll_max_interval=0.0,
    )


@pytest.fixture
def ssh_calls():
    """Records (hostname, username) for every SSH wait."""
    return []


@pytest.fixture
def ssh_waiter(ssh_calls):
    def waiter(hostname, username):
        ssh_calls.append((hostname, username))
    return waiter
