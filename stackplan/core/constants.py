ROOT_PACKAGE_NAME = "stackplan"
MANIFEST_FILE = "stack.yaml"
ENV_FILE = ".env"
