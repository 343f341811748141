from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

# Must stay field-for-field identical to proto/geoip.proto.

PROTO_PACKAGE = "geoip"
RPC_SERVICE_NAME = f"{PROTO_PACKAGE}.GeoIPService"

_FieldProto = descriptor_pb2.FieldDescriptorProto

_MESSAGES: dict[str, list[tuple[str, int, int, int]]] = {
    "CheckCountryRequest": [
        ("ip_address", 1, _FieldProto.TYPE_STRING, _FieldProto.LABEL_OPTIONAL),
        ("allowed_countries", 2, _FieldProto.TYPE_STRING, _FieldProto.LABEL_REPEATED),
    ],
    "CheckCountryResponse": [
        ("allowed", 1, _FieldProto.TYPE_BOOL, _FieldProto.LABEL_OPTIONAL),
        ("country", 2, _FieldProto.TYPE_STRING, _FieldProto.LABEL_OPTIONAL),
    ],
    "HealthRequest": [],
    "HealthResponse": [
        ("status", 1, _FieldProto.TYPE_STRING, _FieldProto.LABEL_OPTIONAL),
        ("service", 2, _FieldProto.TYPE_STRING, _FieldProto.LABEL_OPTIONAL),
    ],
}

_METHODS = (
    ("CheckCountry", "CheckCountryRequest", "CheckCountryResponse"),
    ("Health", "HealthRequest", "HealthResponse"),
)


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="geoip.proto",
        package=PROTO_PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _MESSAGES.items():
        message_proto = file_proto.message_type.add(name=message_name)
        for field_name, number, field_type, label in fields:
            message_proto.field.add(name=field_name, number=number, type=field_type, label=label)

    service_proto = file_proto.service.add(name=RPC_SERVICE_NAME.rsplit(".", 1)[-1])
    for method_name, input_type, output_type in _METHODS:
        service_proto.method.add(
            name=method_name,
            input_type=f".{PROTO_PACKAGE}.{input_type}",
            output_type=f".{PROTO_PACKAGE}.{output_type}",
        )
    return file_proto


# A private pool keeps these definitions from clashing with generated code
# registered in the default pool under the same file name.
_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())


def _message_class(name: str) -> type:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PROTO_PACKAGE}.{name}"))


CheckCountryRequest = _message_class("CheckCountryRequest")
CheckCountryResponse = _message_class("CheckCountryResponse")
HealthRequest = _message_class("HealthRequest")
HealthResponse = _message_class("HealthResponse")
