"""Constants used across the operator."""

# Well-known singleton resource; instances with any other name are ignored
SAMPLES_RESOURCE_NAME = "cluster"
SAMPLES_RESOURCE_KIND = "SamplesResource"
SAMPLES_GROUP = "samplesoperator.config.openshift.io"
SAMPLES_VERSION = "v1alpha1"
SAMPLES_PLURAL = "samplesresources"
SAMPLES_API_VERSION = f"{SAMPLES_GROUP}/{SAMPLES_VERSION}"

# Registry pull secret mirrored into the shared namespace
SAMPLES_REGISTRY_CREDENTIALS = "samples-registry-credentials"

# Namespace receiving imagestreams, templates and the mirrored secret
OPENSHIFT_NAMESPACE = "openshift"

IMAGE_GROUP = "image.openshift.io"
IMAGE_VERSION = "v1"
IMAGESTREAM_PLURAL = "imagestreams"

TEMPLATE_GROUP = "template.openshift.io"
TEMPLATE_VERSION = "v1"
TEMPLATE_PLURAL = "templates"

# Architectures
X86 = "x86_64"
PPC = "ppc64le"

# Content roots, relative to SAMPLES_CONTENT_ROOT
DEFAULT_CONTENT_ROOT = "/opt/openshift/operator"
X86_OCP_CONTENT_DIR = "ocp-x86_64"
X86_OKD_CONTENT_DIR = "okd-x86_64"
PPC64_OCP_CONTENT_DIR = "ocp-ppc64le"

# Path segments selecting the definition type of a file
IMAGESTREAMS_DIR = "imagestreams"
TEMPLATES_DIR = "templates"

# Upstream registries rewritten when spec.samplesRegistry is set
CENTOS_REGISTRIES = ("docker.io",)
RHEL_REGISTRIES = ("registry.redhat.io", "registry.access.redhat.com")

# Tag reference kind denoting a direct image pull
DOCKER_IMAGE_KIND = "DockerImage"

DEFAULT_BOOTSTRAP_DELAY_SECONDS = 5.0
SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
