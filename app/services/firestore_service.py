# app/services/firestore_service.py
import logging
from typing import Dict, Any, List, Optional
from firebase_admin import firestore

from app.services.record_store import RecordStore
from app.utils.datetime_utils import DateTimeUtils


class FirestoreRecordStore(RecordStore):
    """
    Firestore 컬렉션을 RecordStore 인터페이스로 감싼 운영용 저장소.
    레코드 하나가 문서 하나이며, 문서 ID는 레코드의 'id'와 같습니다.
    """

    def __init__(self, collection_name: str, db=None):
        super().__init__(collection_name)
        self.db = db or firestore.client()
        self.collection_ref = self.db.collection(collection_name)
        logging.info(f"FirestoreRecordStore initialized (Collection: {collection_name}).")

    def _to_record(self, doc) -> Dict[str, Any]:
        data = DateTimeUtils.from_firestore(doc.to_dict())
        # Timestamp는 다른 저장소와 동일하게 ISO 문자열로 맞춘다
        for key in ('created_at', 'updated_at'):
            if data.get(key) is not None and not isinstance(data[key], str):
                data[key] = DateTimeUtils.to_iso_string(data[key])
        data.setdefault('id', doc.id)
        return data

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            query = self.collection_ref
            for key, value in (filters or {}).items():
                query = query.where(key, '==', value)
            records = [self._to_record(doc) for doc in query.stream()]
            return self._newest_first(records)
        except Exception as e:
            logging.error(f"Firestore 조회 실패 (Collection: {self.collection_name}): {e}", exc_info=True)
            raise

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        doc = self.collection_ref.document(record_id).get()
        if not doc.exists:
            return None
        return self._to_record(doc)

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if not record.get('id'):
            raise ValueError("레코드에는 'id'가 필요합니다.")
        try:
            self.collection_ref.document(record['id']).set(DateTimeUtils.for_firestore(record))
            logging.info(f"Firestore 저장 성공 (Collection: {self.collection_name}, Doc ID: {record['id']})")
            return record
        except Exception as e:
            logging.error(f"Firestore 저장 실패 (Collection: {self.collection_name}): {e}", exc_info=True)
            raise

    def update(self, record_id: str, fields: Dict[str, Any]) -> bool:
        doc_ref = self.collection_ref.document(record_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.update(DateTimeUtils.for_firestore(fields))
        return True

    def delete(self, record_id: str) -> bool:
        doc_ref = self.collection_ref.document(record_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        return True
