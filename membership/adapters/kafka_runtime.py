"""Kafka transport for `applications.created` events.

Mental model refresher:
- This module is transport glue to Kafka itself.
- The web process publishes one event per stored application and returns.
- The worker maps Kafka records into the consumer-handler flow, which builds
  the admin notification and runs the fallback chain.
- Offsets are committed whatever the delivery outcome: there is no retry
  queue for notifications.
"""

from __future__ import annotations

import json
import os
from functools import partial
from typing import Any, Mapping

from ..config import AppConfig, load_config
from ..domain.records import ApplicationRecord
from .consumer_handler import handle_message
from .payload import EVENT_TYPE_APPLICATION_CREATED, build_application_created_event

DEFAULT_TOPIC = EVENT_TYPE_APPLICATION_CREATED


def publish_application_created_event(
    event: ApplicationRecord | Mapping[str, Any],
    *,
    topic: str | None = None,
) -> dict[str, Any]:
    """Publish one `applications.created` event to Kafka."""
    _KafkaConsumer, KafkaProducer, _TopicPartition, _OffsetAndMetadata = _import_kafka_python()
    payload = (
        build_application_created_event(event) if isinstance(event, ApplicationRecord) else dict(event)
    )
    topic_name = topic or _topic_from_env()
    send_timeout_seconds = float(os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"))

    producer = KafkaProducer(
        bootstrap_servers=_bootstrap_servers_from_env(),
        value_serializer=_serialize_json_object,
        acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
    )
    try:
        metadata = producer.send(topic_name, value=payload).get(timeout=send_timeout_seconds)
        producer.flush(timeout=send_timeout_seconds)
    finally:
        producer.close()

    print(
        f"[PUBLISHED] topic={metadata.topic} partition={metadata.partition} "
        f"offset={metadata.offset} event_id={payload.get('event_id')}"
    )
    return {
        "topic": metadata.topic,
        "partition": metadata.partition,
        "offset": metadata.offset,
        "event_id": payload.get("event_id"),
    }


def run_notification_worker_forever(config: AppConfig | None = None) -> int:
    """Consume `applications.created` and deliver admin notifications."""
    from ..application.submission import ApplicationNotifier

    KafkaConsumer, _KafkaProducer, TopicPartition, OffsetAndMetadata = _import_kafka_python()
    app_config = config or load_config()
    notifier = ApplicationNotifier.from_config(app_config)
    topic_name = _topic_from_env()
    group_id = os.getenv("KAFKA_GROUP_ID", "membership-notification-worker")
    poll_timeout_ms = _poll_timeout_ms_from_env()
    max_records = int(os.getenv("KAFKA_MAX_RECORDS_PER_POLL", "50"))

    consumer = KafkaConsumer(
        topic_name,
        bootstrap_servers=_bootstrap_servers_from_env(),
        group_id=group_id,
        enable_auto_commit=False,
        auto_offset_reset=os.getenv("KAFKA_AUTO_OFFSET_RESET", "earliest"),
    )
    print(
        f"[WORKER START] topic={topic_name} group_id={group_id} "
        f"environment={app_config.environment} "
        f"channels={','.join(notifier.orchestrator.channel_names) or '-'}"
    )

    try:
        while True:
            batches = consumer.poll(timeout_ms=poll_timeout_ms, max_records=max_records)
            for _topic_partition, messages in batches.items():
                for message in messages:
                    message_topic = message.topic
                    message_partition = int(message.partition)
                    message_offset = int(message.offset)

                    def commit_current_offset(_record: Mapping[str, Any]) -> None:
                        offsets = {
                            TopicPartition(message_topic, message_partition): _offset_and_metadata(
                                OffsetAndMetadata, message_offset + 1
                            )
                        }
                        consumer.commit(offsets=offsets)
                        print(
                            f"[COMMIT] topic={message_topic} partition={message_partition} "
                            f"offset={message_offset}"
                        )

                    try:
                        value: Any = _deserialize_json_object(message.value)
                    except Exception as exc:
                        # Leave it to handle_message to log and commit the bad record.
                        print(
                            f"[DECODE ERROR] topic={message_topic} partition={message_partition} "
                            f"offset={message_offset} error={exc}"
                        )
                        value = None

                    result = handle_message(
                        {
                            "topic": message_topic,
                            "partition": message_partition,
                            "offset": message_offset,
                            "value": value,
                        },
                        notify=partial(
                            notifier,
                            context={
                                "topic": message_topic,
                                "partition": message_partition,
                                "offset": message_offset,
                            },
                        ),
                        commit=commit_current_offset,
                    )
                    print(
                        f"[RESULT] topic={message_topic} partition={message_partition} "
                        f"offset={message_offset} status={result['status']} "
                        f"application_id={result['application_id']} error={result['error']}"
                    )
    except KeyboardInterrupt:
        print("[WORKER STOP] received keyboard interrupt")
        return 0
    except Exception as exc:
        print(f"[WORKER ERROR] {exc}")
        return 1
    finally:
        consumer.close()


def _import_kafka_python() -> tuple[Any, Any, Any, Any]:
    try:
        from kafka import KafkaConsumer, KafkaProducer, TopicPartition
        from kafka.structs import OffsetAndMetadata
    except ImportError as exc:
        raise RuntimeError(
            "Kafka support requires `kafka-python`. Install with: pip install kafka-python"
        ) from exc
    return KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata


def _topic_from_env() -> str:
    return os.getenv("KAFKA_TOPIC_APPLICATIONS_CREATED", DEFAULT_TOPIC)


def _bootstrap_servers_from_env() -> list[str]:
    raw = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "")
    if not raw.strip():
        raise RuntimeError("Missing required environment variable: KAFKA_BOOTSTRAP_SERVERS")
    servers = [item.strip() for item in raw.split(",") if item.strip()]
    if not servers:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    return servers


def _poll_timeout_ms_from_env() -> int:
    timeout_ms = int(float(os.getenv("KAFKA_POLL_TIMEOUT_SECONDS", "1.0")) * 1000)
    if timeout_ms <= 0:
        raise RuntimeError("KAFKA_POLL_TIMEOUT_SECONDS must be > 0")
    return timeout_ms


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _deserialize_json_object(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not isinstance(raw, str):
        raise ValueError(f"Unsupported Kafka payload type: {type(raw).__name__}")

    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Kafka payload must decode to a JSON object")
    return parsed


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    for extra in ((-1,), (None,), ()):
        try:
            return offset_and_metadata_type(offset, "", *extra)
        except TypeError:
            continue
    raise RuntimeError("Unsupported kafka-python OffsetAndMetadata signature")
