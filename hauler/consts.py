"""Media types, annotation keys and defaults shared across the package."""

# container media types
OCI_MANIFEST_SCHEMA1 = "application/vnd.oci.image.manifest.v1+json"
DOCKER_MANIFEST_SCHEMA2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST_SCHEMA2 = "application/vnd.docker.distribution.manifest.list.v2+json"
OCI_IMAGE_INDEX_SCHEMA = "application/vnd.oci.image.index.v1+json"
DOCKER_CONFIG_JSON = "application/vnd.docker.container.image.v1+json"
DOCKER_LAYER = "application/vnd.docker.image.rootfs.diff.tar.gzip"
DOCKER_FOREIGN_LAYER = "application/vnd.docker.image.rootfs.foreign.diff.tar.gzip"
DOCKER_UNCOMPRESSED_LAYER = "application/vnd.docker.image.rootfs.diff.tar"
OCI_LAYER = "application/vnd.oci.image.layer.v1.tar+gzip"
OCI_ARTIFACT = "application/vnd.oci.empty.v1+json"

# helm chart media types
CHART_CONFIG_MEDIA_TYPE = "application/vnd.cncf.helm.config.v1+json"
CHART_LAYER_MEDIA_TYPE = "application/vnd.cncf.helm.chart.content.v1.tar+gzip"
PROV_LAYER_MEDIA_TYPE = "application/vnd.cncf.helm.chart.provenance.v1.prov"

# file media types
FILE_LAYER_MEDIA_TYPE = "application/vnd.content.hauler.file.layer.v1"
FILE_LOCAL_CONFIG_MEDIA_TYPE = "application/vnd.content.hauler.file.local.config.v1+json"
FILE_DIRECTORY_CONFIG_MEDIA_TYPE = "application/vnd.content.hauler.file.directory.config.v1+json"
FILE_HTTP_CONFIG_MEDIA_TYPE = "application/vnd.content.hauler.file.http.config.v1+json"

# memory media types
MEMORY_CONFIG_MEDIA_TYPE = "application/vnd.content.hauler.memory.config.v1+json"

# wasm media types
WASM_ARTIFACT_LAYER_MEDIA_TYPE = "application/vnd.wasm.content.layer.v1+wasm"
WASM_CONFIG_MEDIA_TYPE = "application/vnd.wasm.config.v1+json"

# unknown media types
UNKNOWN_MANIFEST = "application/vnd.hauler.cattle.io.unknown.v1+json"
UNKNOWN_LAYER = "application/vnd.content.hauler.unknown.layer"
UNKNOWN = "unknown"

# vendor prefixes
OCI_VENDOR_PREFIX = "vnd.oci"
DOCKER_VENDOR_PREFIX = "vnd.docker"
HAULER_VENDOR_PREFIX = "vnd.hauler"

# annotation keys
KIND_ANNOTATION_NAME = "kind"
KIND_ANNOTATION_IMAGE = "dev.cosignproject.cosign/image"
KIND_ANNOTATION_INDEX = "dev.cosignproject.cosign/imageIndex"
IMAGE_ANNOTATION_KEY = "hauler.dev/key"
IMAGE_ANNOTATION_PLATFORM = "hauler.dev/platform"
IMAGE_ANNOTATION_REGISTRY = "hauler.dev/registry"
IMAGE_ANNOTATION_TLOG = "hauler.dev/use-tlog-verify"

# keyless validation options
IMAGE_ANNOTATION_CERT_IDENTITY = "hauler.dev/certificate-identity"
IMAGE_ANNOTATION_CERT_IDENTITY_REGEXP = "hauler.dev/certificate-identity-regexp"
IMAGE_ANNOTATION_CERT_OIDC_ISSUER = "hauler.dev/certificate-oidc-issuer"
IMAGE_ANNOTATION_CERT_OIDC_ISSUER_REGEXP = "hauler.dev/certificate-oidc-issuer-regexp"
IMAGE_ANNOTATION_CERT_GITHUB_WORKFLOW_REPOSITORY = "hauler.dev/certificate-github-workflow-repository"

# content kinds
IMAGES_CONTENT_KIND = "Images"
CHARTS_CONTENT_KIND = "Charts"
FILES_CONTENT_KIND = "Files"
DRIVER_CONTENT_KIND = "Driver"
IMAGE_TXTS_CONTENT_KIND = "ImageTxts"
CHARTS_COLLECTION_KIND = "ThickCharts"

# content groups
CONTENT_GROUP = "content.hauler.cattle.io"
COLLECTION_GROUP = "collection.hauler.cattle.io"

# environment variables
HAULER_DIR = "HAULER_DIR"
HAULER_TEMP_DIR = "HAULER_TEMP_DIR"
HAULER_STORE_DIR = "HAULER_STORE_DIR"
HAULER_IGNORE_ERRORS = "HAULER_IGNORE_ERRORS"

# container files and directories
IMAGE_MANIFEST_FILE = "manifest.json"
IMAGE_CONFIG_FILE = "config.json"

# OCI layout names
IMAGE_INDEX_FILE = "index.json"
IMAGE_LAYOUT_FILE = "oci-layout"
IMAGE_BLOBS_DIR = "blobs"
ANNOTATION_REF_NAME = "org.opencontainers.image.ref.name"
ANNOTATION_TITLE = "org.opencontainers.image.title"

# other constraints
CARBIDE_REGISTRY = "rgcrprod.azurecr.us"
DEFAULT_NAMESPACE = "hauler"
DEFAULT_TAG = "latest"
DEFAULT_STORE_NAME = "store"
DEFAULT_HAULER_DIR_NAME = ".hauler"
DEFAULT_HAULER_TEMP_DIR_NAME = "hauler"
DEFAULT_REGISTRY_ROOT_DIR = "registry"
DEFAULT_REGISTRY_PORT = 5000
DEFAULT_FILESERVER_ROOT_DIR = "fileserver"
DEFAULT_FILESERVER_PORT = 8080
DEFAULT_FILESERVER_TIMEOUT = 60
DEFAULT_HAULER_ARCHIVE_NAME = "haul.tar.zst"
DEFAULT_HAULER_MANIFEST_NAME = "hauler-manifest.yaml"
DEFAULT_RETRIES = 3
RETRIES_INTERVAL = 5
CUSTOM_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"