"""Staged load test for the users service.

Run with:
    locust -f tests/load/locustfile.py --headless --host=http://localhost:3001

Each virtual user loops through list, get-by-id, create, update of the
reserved setup user and delete of the user it just created, then thinks for
a second. The user count follows a ramp-up / hold / ramp-down schedule.
"""

import httpx
import structlog
from locust import HttpUser, LoadTestShape, constant, events, task
from locust.runners import MasterRunner, WorkerRunner

from libs.common.config import LoadTestConfig
from libs.common.logging import configure_logging
from libs.loadtest import session
from libs.loadtest.metrics import Rate, Trend, check, checks
from libs.loadtest.stages import build_stages, target_at
from libs.loadtest.stats import collect_metrics
from libs.loadtest.thresholds import DEFAULT_THRESHOLDS, evaluate_thresholds, parse_thresholds, report

logger = structlog.get_logger("loadtest")

config = LoadTestConfig()

# Custom metrics, per process
user_list_duration = Trend("user_list_duration")
creation_success = Rate("user_creation_success")
CUSTOM_METRICS = {
    "checks": checks,
    "user_list_duration": user_list_duration,
    "user_creation_success": creation_success,
}

setup_data = session.SetupData()


class UsersApiUser(HttpUser):
    """Virtual user exercising the full CRUD cycle."""

    wait_time = constant(config.load_think_time_seconds)
    host = config.base_url

    @task
    def crud_cycle(self):
        self.read_operations()
        self.write_operations()

    def read_operations(self):
        with self.client.get("/users", name="GET /users", catch_response=True) as response:
            check(response, {
                "GET /users returns 200": lambda r: r.status_code == 200,
                "GET /users returns array": lambda r: isinstance(r.json(), list),
            })
            user_list_duration.add(response.elapsed.total_seconds() * 1000)

        with self.client.get("/users/1", name="GET /users/:id", catch_response=True) as response:
            check(response, {
                "GET /users/1 returns 200": lambda r: r.status_code == 200,
                "GET /users/1 has correct id": lambda r: r.json()["id"] == 1,
            })

    def write_operations(self):
        with self.client.post(
            "/users",
            json=session.new_user_payload(),
            headers=session.JSON_HEADERS,
            name="POST /users",
            catch_response=True,
        ) as response:
            created = check(response, {
                "POST /users returns 201": lambda r: r.status_code == 201,
                "POST /users returns id": lambda r: isinstance(r.json(), dict) and r.json().get("id") is not None,
            })
            new_id = response.json()["id"] if created else None
        creation_success.add(created)

        if setup_data.setup_user_id:
            with self.client.put(
                f"/users/{setup_data.setup_user_id}",
                json=session.update_payload(),
                headers=session.JSON_HEADERS,
                name="PUT /users/:id",
                catch_response=True,
            ) as response:
                check(response, {
                    "PUT /users/:id returns 200": lambda r: r.status_code == 200,
                })

        # Only the user created above is deleted, never the setup user
        if new_id:
            with self.client.delete(
                f"/users/{new_id}",
                name="DELETE /users/:id",
                catch_response=True,
            ) as response:
                check(response, {
                    "DELETE /users/:id returns 200": lambda r: r.status_code == 200,
                })


class StagedShape(LoadTestShape):
    """Ramp up, hold, ramp down, as configured by ``LoadTestConfig``."""

    stages = build_stages(config.stages())

    def tick(self):
        return target_at(self.stages, self.get_run_time())


def _client(environment) -> httpx.Client:
    return httpx.Client(
        base_url=environment.host or config.base_url,
        timeout=config.load_request_timeout_seconds,
    )


@events.init.add_listener
def on_init(environment, **kwargs):
    configure_logging("users-loadtest", config.app_log_level, config.app_log_format)


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    if isinstance(environment.runner, MasterRunner):
        return
    with _client(environment) as client:
        data = session.setup(client)
    setup_data.setup_user_id = data.setup_user_id


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    if isinstance(environment.runner, MasterRunner):
        return
    with _client(environment) as client:
        session.teardown(client, setup_data)


@events.quitting.add_listener
def on_quitting(environment, **kwargs):
    if isinstance(environment.runner, WorkerRunner):
        return

    thresholds = parse_thresholds(DEFAULT_THRESHOLDS)
    if isinstance(environment.runner, MasterRunner):
        # Custom metrics live on the workers
        thresholds = [t for t in thresholds if t.metric_key not in CUSTOM_METRICS]

    metrics = collect_metrics(environment.stats, {t.metric_key for t in thresholds}, CUSTOM_METRICS)
    logger.info("Custom metrics", **{name: metric.summary() for name, metric in CUSTOM_METRICS.items()})
    if not report(evaluate_thresholds(thresholds, metrics)):
        environment.process_exit_code = 1
