"""Built-in configuration role tree for the device-management platform.

Identities are wire-stable keys consumed by the configuration UI; they must not be
renamed, including the historical ``AssetManagment`` spelling.
"""

from __future__ import annotations

from element_roles.schema.role import ElementRole

ROLE_ROOT = "Root"

ROLE_GLOBALS = "Globals"
ROLE_GLOBALS_GLOBAL = "Globals_Global"

ROLE_DATA_MANAGEMENT = "DataManagement"
ROLE_DATA_MANAGEMENT_DATASTORE = "DataManagement_Datastore"
ROLE_DATA_MANAGEMENT_CACHE_PROVIDER = "DataManagement_CacheProvider"
ROLE_DATA_MANAGEMENT_DEVICE_MODEL_INITIALIZER = "DataManagement_DeviceModelInitializer"
ROLE_DATA_MANAGEMENT_ASSET_MODEL_INITIALIZER = "DataManagement_AssetModelInitializer"
ROLE_DATA_MANAGEMENT_SCHEDULE_MODEL_INITIALIZER = "DataManagement_ScheduleModelInitializer"

ROLE_DEVICE_COMMUNICATION = "DeviceCommunication"
ROLE_DEVICE_COMMUNICATION_EVENT_SOURCES = "DeviceCommunication_EventSources"
ROLE_EVENT_SOURCES_EVENT_SOURCE = "EventSources_EventSource"
ROLE_EVENT_SOURCE_BINARY_EVENT_DECODER = "EventSource_BinaryEventDecoder"
ROLE_DEVICE_COMMUNICATION_INBOUND_PROCESSING_STRATEGY = (
    "DeviceCommunication_InboundProcessingStrategy"
)
ROLE_INBOUND_PROCESSING_STRATEGY_STRATEGY = "InboundProcessingStrategy_Strategy"
ROLE_DEVICE_COMMUNICATION_REGISTRATION = "DeviceCommunication_Registration"
ROLE_REGISTRATION_REGISTRATION_MANAGER = "Registration_RegistrationManager"
ROLE_DEVICE_COMMUNICATION_BATCH_OPERATIONS = "DeviceCommunication_BatchOperations"
ROLE_BATCH_OPERATIONS_BATCH_OPERATION_MANAGER = "BatchOperations_BatchOperationManager"
ROLE_DEVICE_COMMUNICATION_COMMAND_ROUTING = "DeviceCommunication_CommandRouting"
ROLE_COMMAND_ROUTING_COMMAND_ROUTER = "CommandRouting_CommandRouter"
ROLE_COMMAND_ROUTING_SPECIFICATION_MAPPING = "CommandRouting_SpecificationMappingRouter_Mapping"
ROLE_DEVICE_COMMUNICATION_COMMAND_DESTINATIONS = "DeviceCommunication_CommandDestinations"
ROLE_COMMAND_DESTINATIONS_COMMAND_DESTINATION = "CommandDestinations_CommandDestination"
ROLE_COMMAND_DESTINATIONS_BINARY_COMMAND_ENCODER = "CommandDestinations_BinaryCommandEncoder"
ROLE_COMMAND_DESTINATIONS_PARAMETER_EXTRACTOR = "CommandDestinations_ParameterExtractor"

ROLE_INBOUND_PROCESSING_CHAIN = "InboundProcessingChain"
ROLE_INBOUND_PROCESSING_CHAIN_EVENT_PROCESSOR = "InboundProcessingChain_EventProcessor"
ROLE_OUTBOUND_PROCESSING_CHAIN = "OutboundProcessingChain"
ROLE_ASSET_MANAGEMENT = "AssetManagment"


def _leaf(
    role_id: str,
    name: str,
    *,
    optional: bool,
    multiple: bool = False,
    reorderable: bool = False,
) -> ElementRole:
    return ElementRole(
        role_id=role_id,
        name=name,
        optional=optional,
        multiple=multiple,
        reorderable=reorderable,
    )


def _container(role_id: str, *children: str, multiple: bool = False) -> ElementRole:
    """Unnamed mandatory grouping role."""

    return ElementRole(role_id=role_id, multiple=multiple, children=children)


def default_roles() -> tuple[ElementRole, ...]:
    return (
        # Globals
        ElementRole(
            role_id=ROLE_GLOBALS_GLOBAL,
            name="Global",
            optional=True,
            multiple=True,
            reorderable=True,
        ),
        _container(ROLE_GLOBALS, ROLE_GLOBALS_GLOBAL, multiple=True),
        # Data management
        _leaf(ROLE_DATA_MANAGEMENT_DATASTORE, "Datastore", optional=False),
        _leaf(ROLE_DATA_MANAGEMENT_CACHE_PROVIDER, "Cache Provider", optional=True),
        _leaf(
            ROLE_DATA_MANAGEMENT_DEVICE_MODEL_INITIALIZER,
            "Device Model Initializer",
            optional=True,
        ),
        _leaf(
            ROLE_DATA_MANAGEMENT_ASSET_MODEL_INITIALIZER,
            "Asset Model Initializer",
            optional=True,
        ),
        _leaf(
            ROLE_DATA_MANAGEMENT_SCHEDULE_MODEL_INITIALIZER,
            "Schedule Model Initializer",
            optional=True,
        ),
        _container(
            ROLE_DATA_MANAGEMENT,
            ROLE_DATA_MANAGEMENT_DATASTORE,
            ROLE_DATA_MANAGEMENT_CACHE_PROVIDER,
            ROLE_DATA_MANAGEMENT_DEVICE_MODEL_INITIALIZER,
            ROLE_DATA_MANAGEMENT_ASSET_MODEL_INITIALIZER,
            ROLE_DATA_MANAGEMENT_SCHEDULE_MODEL_INITIALIZER,
            multiple=True,
        ),
        # Device communication
        _leaf(ROLE_EVENT_SOURCE_BINARY_EVENT_DECODER, "Binary Event Decoder", optional=True),
        ElementRole(
            role_id=ROLE_EVENT_SOURCES_EVENT_SOURCE,
            name="Event Source",
            optional=True,
            multiple=True,
            reorderable=True,
            children=(ROLE_EVENT_SOURCE_BINARY_EVENT_DECODER,),
        ),
        _container(ROLE_DEVICE_COMMUNICATION_EVENT_SOURCES, ROLE_EVENT_SOURCES_EVENT_SOURCE),
        _leaf(ROLE_INBOUND_PROCESSING_STRATEGY_STRATEGY, "Strategy", optional=False),
        _container(
            ROLE_DEVICE_COMMUNICATION_INBOUND_PROCESSING_STRATEGY,
            ROLE_INBOUND_PROCESSING_STRATEGY_STRATEGY,
        ),
        _leaf(ROLE_REGISTRATION_REGISTRATION_MANAGER, "Registration Manager", optional=False),
        _container(
            ROLE_DEVICE_COMMUNICATION_REGISTRATION,
            ROLE_REGISTRATION_REGISTRATION_MANAGER,
        ),
        _leaf(
            ROLE_BATCH_OPERATIONS_BATCH_OPERATION_MANAGER,
            "Batch Operation Manager",
            optional=False,
        ),
        _container(
            ROLE_DEVICE_COMMUNICATION_BATCH_OPERATIONS,
            ROLE_BATCH_OPERATIONS_BATCH_OPERATION_MANAGER,
        ),
        _leaf(
            ROLE_COMMAND_ROUTING_SPECIFICATION_MAPPING,
            "Mapping",
            optional=True,
            multiple=True,
            reorderable=True,
        ),
        # Mappings belong to the specification mapping router implementation.
        ElementRole(
            role_id=ROLE_COMMAND_ROUTING_COMMAND_ROUTER,
            name="Command Router",
            children=(ROLE_COMMAND_ROUTING_SPECIFICATION_MAPPING,),
        ),
        _container(ROLE_DEVICE_COMMUNICATION_COMMAND_ROUTING, ROLE_COMMAND_ROUTING_COMMAND_ROUTER),
        _leaf(
            ROLE_COMMAND_DESTINATIONS_BINARY_COMMAND_ENCODER,
            "Binary Command Encoder",
            optional=False,
        ),
        _leaf(ROLE_COMMAND_DESTINATIONS_PARAMETER_EXTRACTOR, "Parameter Extractor", optional=False),
        ElementRole(
            role_id=ROLE_COMMAND_DESTINATIONS_COMMAND_DESTINATION,
            name="Command Destination",
            optional=True,
            multiple=True,
            reorderable=True,
            children=(
                ROLE_COMMAND_DESTINATIONS_BINARY_COMMAND_ENCODER,
                ROLE_COMMAND_DESTINATIONS_PARAMETER_EXTRACTOR,
            ),
        ),
        _container(
            ROLE_DEVICE_COMMUNICATION_COMMAND_DESTINATIONS,
            ROLE_COMMAND_DESTINATIONS_COMMAND_DESTINATION,
        ),
        _container(
            ROLE_DEVICE_COMMUNICATION,
            ROLE_DEVICE_COMMUNICATION_EVENT_SOURCES,
            ROLE_DEVICE_COMMUNICATION_INBOUND_PROCESSING_STRATEGY,
            ROLE_DEVICE_COMMUNICATION_REGISTRATION,
            ROLE_DEVICE_COMMUNICATION_BATCH_OPERATIONS,
            ROLE_DEVICE_COMMUNICATION_COMMAND_ROUTING,
            ROLE_DEVICE_COMMUNICATION_COMMAND_DESTINATIONS,
            multiple=True,
        ),
        # Processing chains
        ElementRole(
            role_id=ROLE_INBOUND_PROCESSING_CHAIN_EVENT_PROCESSOR,
            name="Event Processor",
            optional=True,
            multiple=True,
            reorderable=True,
        ),
        _container(
            ROLE_INBOUND_PROCESSING_CHAIN,
            ROLE_INBOUND_PROCESSING_CHAIN_EVENT_PROCESSOR,
            multiple=True,
        ),
        _container(ROLE_OUTBOUND_PROCESSING_CHAIN, multiple=True),
        _container(ROLE_ASSET_MANAGEMENT, multiple=True),
        _container(
            ROLE_ROOT,
            ROLE_GLOBALS,
            ROLE_DATA_MANAGEMENT,
            ROLE_DEVICE_COMMUNICATION,
            ROLE_INBOUND_PROCESSING_CHAIN,
            ROLE_OUTBOUND_PROCESSING_CHAIN,
            ROLE_ASSET_MANAGEMENT,
            multiple=True,
        ),
    )


__all__ = [
    "ROLE_ASSET_MANAGEMENT",
    "ROLE_BATCH_OPERATIONS_BATCH_OPERATION_MANAGER",
    "ROLE_COMMAND_DESTINATIONS_BINARY_COMMAND_ENCODER",
    "ROLE_COMMAND_DESTINATIONS_COMMAND_DESTINATION",
    "ROLE_COMMAND_DESTINATIONS_PARAMETER_EXTRACTOR",
    "ROLE_COMMAND_ROUTING_COMMAND_ROUTER",
    "ROLE_COMMAND_ROUTING_SPECIFICATION_MAPPING",
    "ROLE_DATA_MANAGEMENT",
    "ROLE_DATA_MANAGEMENT_ASSET_MODEL_INITIALIZER",
    "ROLE_DATA_MANAGEMENT_CACHE_PROVIDER",
    "ROLE_DATA_MANAGEMENT_DATASTORE",
    "ROLE_DATA_MANAGEMENT_DEVICE_MODEL_INITIALIZER",
    "ROLE_DATA_MANAGEMENT_SCHEDULE_MODEL_INITIALIZER",
    "ROLE_DEVICE_COMMUNICATION",
    "ROLE_DEVICE_COMMUNICATION_BATCH_OPERATIONS",
    "ROLE_DEVICE_COMMUNICATION_COMMAND_DESTINATIONS",
    "ROLE_DEVICE_COMMUNICATION_COMMAND_ROUTING",
    "ROLE_DEVICE_COMMUNICATION_EVENT_SOURCES",
    "ROLE_DEVICE_COMMUNICATION_INBOUND_PROCESSING_STRATEGY",
    "ROLE_DEVICE_COMMUNICATION_REGISTRATION",
    "ROLE_EVENT_SOURCES_EVENT_SOURCE",
    "ROLE_EVENT_SOURCE_BINARY_EVENT_DECODER",
    "ROLE_GLOBALS",
    "ROLE_GLOBALS_GLOBAL",
    "ROLE_INBOUND_PROCESSING_CHAIN",
    "ROLE_INBOUND_PROCESSING_CHAIN_EVENT_PROCESSOR",
    "ROLE_INBOUND_PROCESSING_STRATEGY_STRATEGY",
    "ROLE_OUTBOUND_PROCESSING_CHAIN",
    "ROLE_REGISTRATION_REGISTRATION_MANAGER",
    "ROLE_ROOT",
    "default_roles",
]
