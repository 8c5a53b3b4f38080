from stackplan import EdgeStrength, Stack

JWT_SECRET = "c2VjcmV0LWtleS1mb3ItdGVzdHM="
KAFKA_ENDPOINTS = [
    "localhost.localstack.cloud:4510",
    "localhost.localstack.cloud:4511",
    "localhost.localstack.cloud:4512",
]
KAFKA_BOOTSTRAP_SERVERS = {
    "SPRING_KAFKA_BOOTSTRAP_SERVERS": "${kafka.bootstrap_endpoints}",
}


def datasource_environment(db: str) -> dict[str, str]:
    """Datasource settings of a Spring service backed by `db`."""
    return {
        "SPRING_DATASOURCE_URL": (
            f"jdbc:postgresql://${{{db}.address}}:${{{db}.port}}"
            f"/${{{db}.name}}"
        ),
        "SPRING_DATASOURCE_USERNAME": f"${{{db}.username}}",
        "SPRING_DATASOURCE_PASSWORD": f"${{{db}.credential}}",
        "SPRING_JPA_HIBERNATE_DDL_AUTO": "update",
        "SPRING_SQL_INIT_MODE": "always",
        "SPRING_DATASOURCE_HIKARI_INITIALIZATION_FAIL_TIMEOUT": "60000",
    }


def get_scenario_stack(finalize: bool = True) -> Stack:
    """Network N, database D monitored by HC-D, service S."""
    stack = Stack(name="scenario")
    stack.declare("N", "network")
    stack.declare("D", "database", {"database_name": "d-db"})
    stack.declare("HC-D", "health_check", {"target": "D", "port": 5432})
    stack.declare("S", "service", {"image": "s", "ports": [8080]})
    stack.depends("D", "N")
    stack.depends("S", "D")
    if finalize:
        stack.finalize()
    return stack


def get_patient_management_stack(finalize: bool = True) -> Stack:
    stack = Stack(name="patient-management")
    stack.declare(
        "patient-management-vpc",
        "network",
        {"name": "PatientManagementVPC", "max_azs": 2},
    )
    for name in ("auth-service", "patient-service"):
        stack.declare(
            f"{name}-db",
            "database",
            {"database_name": f"{name}-db"},
        )
    for name in ("auth-service", "patient-service"):
        stack.declare(
            f"{name}-db-check",
            "health_check",
            {"target": f"{name}-db", "port": 5432},
        )
    stack.declare(
        "kafka",
        "message_cluster",
        {
            "cluster_name": "kafka-cluster",
            "bootstrap_endpoints": KAFKA_ENDPOINTS,
        },
    )
    stack.declare(
        "cluster",
        "compute_cluster",
        {"namespace": "patient-management.local"},
    )
    stack.declare(
        "auth-service",
        "service",
        {
            "image": "auth-service",
            "ports": [4005],
            "cluster": "cluster",
            "environment": {
                "JWT_SECRET": JWT_SECRET,
                **datasource_environment("auth-service-db"),
            },
        },
    )
    stack.declare(
        "billing-service",
        "service",
        {"image": "billing-service", "ports": [4001, 9001]},
    )
    stack.declare(
        "analytics-service",
        "service",
        {
            "image": "analytics-service",
            "ports": [4002],
            "environment": KAFKA_BOOTSTRAP_SERVERS,
        },
    )
    stack.declare(
        "patient-service",
        "service",
        {
            "image": "patient-service",
            "ports": [4000],
            "environment": {
                "BILLING_SERVICE_ADDRESS": "host.docker.internal",
                "BILLING_SERVICE_GRPC_PORT": "9001",
                **datasource_environment("patient-service-db"),
                **KAFKA_BOOTSTRAP_SERVERS,
            },
        },
    )
    stack.declare(
        "api-gateway",
        "service",
        {
            "image": "api-gateway",
            "ports": [4004],
            "public": True,
            "health_check_grace_period": 60,
            "environment": {
                "SPRING_PROFILES_ACTIVE": "prod",
                "AUTH_SERVICE_URL": (
                    "http://${auth-service.address}:${auth-service.port}"
                ),
            },
        },
    )
    for id in ("auth-service-db", "patient-service-db", "kafka", "cluster"):
        stack.depends(id, "patient-management-vpc")
    for id in (
        "auth-service",
        "billing-service",
        "analytics-service",
        "patient-service",
        "api-gateway",
    ):
        stack.depends(id, "cluster")
    stack.depends("auth-service", "auth-service-db-check")
    stack.depends("auth-service", "auth-service-db")
    stack.depends("analytics-service", "kafka")
    stack.depends("patient-service", "patient-service-db")
    stack.depends("patient-service", "patient-service-db-check")
    stack.depends("patient-service", "billing-service")
    stack.depends("patient-service", "kafka")
    stack.depends("api-gateway", "auth-service", EdgeStrength.HARD)
    if finalize:
        stack.finalize()
    return stack
